"""Detector for Maven pom.xml dependencies."""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from packageurl import PackageURL

from ...exceptions import FileProcessingError
from ...matching import PACKAGE_TARGETS, EvidenceUnit, match_technologies
from ...registry import Registry
from ...result import DetectionResult

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")


@dataclass
class MavenCoordinate:
    """groupId:artifactId:version of a parent or dependency."""

    group_id: str = ""
    artifact_id: str = ""
    version: Optional[str] = None

    def __str__(self) -> str:
        coordinate = f"{self.group_id}:{self.artifact_id}"
        return f"{coordinate}:{self.version}" if self.version else coordinate

    def to_purl(self) -> Optional[PackageURL]:
        if not self.artifact_id:
            return None
        return PackageURL(type="maven", namespace=self.group_id or None, name=self.artifact_id, version=self.version)


@dataclass
class MavenProject:
    """The parts of a Maven project descriptor used for detection."""

    parent: Optional[MavenCoordinate] = None
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[MavenCoordinate] = field(default_factory=list)


def _local(tag: str) -> str:
    """Strip the XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _text(element: ET.Element, name: str) -> str:
    child = _child(element, name)
    return (child.text or "").strip() if child is not None else ""


def _coordinate(element: ET.Element, properties: Dict[str, str]) -> MavenCoordinate:
    version = _text(element, "version") or None
    if version:
        version = _PROPERTY_RE.sub(lambda m: properties.get(m.group(1), m.group(0)), version)
        if "${" in version:
            version = None
    return MavenCoordinate(
        group_id=_text(element, "groupId"),
        artifact_id=_text(element, "artifactId"),
        version=version,
    )


def read_pom(file: Path) -> MavenProject:
    """
    Read parent, properties and dependencies from a pom.xml.

    Dependencies come from <dependencies> and <dependencyManagement>.
    Property placeholders in versions are resolved from <properties>;
    unresolvable versions are dropped.

    Raises:
        FileProcessingError: If the file is not well-formed XML.
    """
    try:
        root = ET.parse(file).getroot()
    except (ET.ParseError, OSError) as e:
        raise FileProcessingError(f"Cannot parse Maven descriptor {file}: {e}") from e

    project = MavenProject()

    properties_element = _child(root, "properties")
    if properties_element is not None:
        for prop in properties_element:
            project.properties[_local(prop.tag)] = (prop.text or "").strip()

    parent_element = _child(root, "parent")
    if parent_element is not None:
        project.parent = _coordinate(parent_element, project.properties)

    containers = [root]
    management = _child(root, "dependencyManagement")
    if management is not None:
        containers.append(management)

    for container in containers:
        dependencies = _child(container, "dependencies")
        if dependencies is None:
            continue
        for dependency in dependencies:
            if _local(dependency.tag) == "dependency":
                project.dependencies.append(_coordinate(dependency, project.properties))

    return project


class MavenPomDetector:
    """Classifies pom.xml dependencies against the registry using maven purls."""

    name = "maven-pom"
    infrastructure = False

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if file.name.lower() != "pom.xml":
            return

        project = read_pom(file)
        for dependency in project.dependencies:
            unit = EvidenceUnit(text=f"{dependency.group_id}:{dependency.artifact_id}", purl=dependency.to_purl())
            for match in match_technologies(self._registry, PACKAGE_TARGETS, unit, str(dependency)):
                result.record(match)
