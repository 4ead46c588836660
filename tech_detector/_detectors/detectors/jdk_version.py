"""Detector for the targeted JDK version."""

import re
from pathlib import Path
from typing import Optional

from ...result import DetectionResult
from ..utils import read_text, relative_path
from .dockerfile import is_dockerfile
from .maven_pom import read_pom

POM_VERSION_PROPERTIES = ("java.version", "maven.compiler.release", "maven.compiler.target", "maven.compiler.source")

_GRADLE_VERSION_RES = (
    re.compile(r"JavaLanguageVersion\.of\(\s*(\d+)\s*\)"),
    re.compile(r"(?:source|target)Compatibility\s*=\s*JavaVersion\.VERSION_(\d+(?:_\d+)?)"),
    re.compile(r"(?:source|target)Compatibility\s*=\s*['\"]?(\d+(?:\.\d+)?)['\"]?"),
)

_JDK_IMAGE_RE = re.compile(
    r"^\s*FROM\s+(?:--platform=\S+\s+)?(?:\S+/)?"
    r"(openjdk|eclipse-temurin|amazoncorretto|adoptopenjdk|liberica\w*|zulu-openjdk\w*|azul/zulu-openjdk\w*)"
    r"[:\s](\S+)",
    re.IGNORECASE | re.MULTILINE,
)


def major_java_version(raw: str) -> Optional[str]:
    """Normalize "1.8", "17-jdk", "VERSION_11" or "21.0.2" to a major version."""
    match = re.match(r"^(?:1[._])?(\d+)", raw.strip())
    return match.group(1) if match else None


class JdkVersionDetector:
    """Records "JDK:<major>" runtimes from Maven properties, Gradle toolchains and JDK base images."""

    name = "jdk-version"
    infrastructure = False

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if name == "pom.xml":
            version = self._from_pom(file)
        elif name.endswith((".gradle", ".gradle.kts")):
            version = self._from_gradle(read_text(file))
        elif is_dockerfile(name):
            version = self._from_dockerfile(read_text(file))
        else:
            return

        if version:
            result.add_runtime(f"JDK:{version}", f"{relative_path(file, project_root)} -> {version}")

    @staticmethod
    def _from_pom(file: Path) -> Optional[str]:
        properties = read_pom(file).properties
        for prop in POM_VERSION_PROPERTIES:
            value = properties.get(prop)
            if value:
                return major_java_version(value)
        return None

    @staticmethod
    def _from_gradle(content: str) -> Optional[str]:
        for pattern in _GRADLE_VERSION_RES:
            match = pattern.search(content)
            if match:
                return major_java_version(match.group(1))
        return None

    @staticmethod
    def _from_dockerfile(content: str) -> Optional[str]:
        match = _JDK_IMAGE_RE.search(content)
        return major_java_version(match.group(2)) if match else None
