"""Spring Framework / Spring Boot detector."""

from pathlib import Path

from ...logging_config import logger
from ...result import DetectionResult
from ..utils import read_text, relative_path
from .maven_pom import read_pom

# Files whose content may reference Spring
SPRING_SOURCE_SUFFIXES = (".java", ".kt", ".groovy", ".gradle", ".kts", ".xml", ".properties", ".yml", ".yaml")
SPRING_TEXT_MARKERS = ("org.springframework", "spring-boot")


class SpringFrameworkDetector:
    """
    Detects Spring from a Spring Boot parent or Spring dependencies in
    pom.xml, or from Spring references in source and configuration files.
    """

    name = "spring"
    infrastructure = False

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if name == "pom.xml":
            self._inspect_pom(file, project_root, result)
        elif name.endswith(SPRING_SOURCE_SUFFIXES):
            content = read_text(file, sample_large=True).lower()
            if any(marker in content for marker in SPRING_TEXT_MARKERS):
                result.add_framework("Spring Framework", relative_path(file, project_root))

    def _inspect_pom(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        project = read_pom(file)
        location = relative_path(file, project_root)

        parent = project.parent
        if parent is not None and "org.springframework.boot" in parent.group_id:
            logger.debug(f"Spring Boot parent found in {location}")
            result.add_framework("Spring Boot", f"{location} parent:{parent.version}")

        for dependency in project.dependencies:
            if "org.springframework" in dependency.group_id or "spring" in dependency.artifact_id:
                result.add_framework("Spring Framework", str(dependency))
