"""Configuration for tech-detector runs."""

from dataclasses import dataclass, field
from typing import List, Optional

from ._detectors import DEFAULT_MAX_FILES
from .exceptions import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration settings for a detection run."""

    paths: List[str] = field(default_factory=list)
    registry_path: Optional[str] = None
    aggregate: bool = False
    compact: bool = False
    max_files: int = DEFAULT_MAX_FILES
    workers: int = 1
    log_level: str = "WARNING"
    summary: bool = False
    output_file: Optional[str] = None

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.paths:
            raise ConfigurationError("No project path given. Pass one or more PATHS or use --path.")
        if self.aggregate and len(self.paths) > 1:
            raise ConfigurationError("Aggregate mode takes exactly one root directory")
        if self.max_files < 1:
            raise ConfigurationError(f"max_files must be at least 1, got {self.max_files}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level '{self.log_level}'. Expected one of: {', '.join(LOG_LEVELS)}")

    @property
    def pretty(self) -> bool:
        return not self.compact


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]
