"""Custom exceptions for tech-detector."""


class TechDetectorError(Exception):
    """Base exception for all tech-detector operations."""


class ConfigurationError(TechDetectorError):
    """Raised when configuration validation fails."""


class RegistryError(TechDetectorError):
    """Raised when the technology registry cannot be loaded or is malformed."""


class SBOMParseError(TechDetectorError):
    """Raised when an SBOM document cannot be parsed."""


class ScanError(TechDetectorError):
    """Raised when a project root cannot be scanned at all."""


class FileProcessingError(TechDetectorError):
    """Raised when file operations fail."""
