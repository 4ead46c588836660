"""Protocol definition for file detector plugins."""

from pathlib import Path
from typing import Protocol

from ..result import DetectionResult


class DetectorPlugin(Protocol):
    """Protocol for file-based technology detection plugins.

    Each plugin inspects one file at a time and records findings on the
    shared DetectionResult. Plugins never return values and treat the
    result as append-only.

    Example:
        class TerraformDetector:
            name = "terraform"
            infrastructure = True

            def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
                if file.suffix == ".tf":
                    result.add_infrastructure("Terraform", str(file.relative_to(project_root)))
    """

    @property
    def name(self) -> str:
        """Unique plugin name.

        Used for logging and for selecting a subset of plugins.
        Examples: "dockerfile", "package-json", "maven-pom"
        """
        ...

    @property
    def infrastructure(self) -> bool:
        """Whether this plugin targets deployment/build artifacts.

        Infrastructure plugins still run when an SBOM already describes
        the project's languages and frameworks.
        """
        ...

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        """Inspect one file and add any findings to the result.

        Args:
            file: File being inspected
            project_root: Root of the scanned project
            result: Aggregator to update (append-only)
        """
        ...
