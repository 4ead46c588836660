"""SBOM discovery, parsing and structured evidence processing.

CycloneDX documents (JSON or XML) are parsed with cyclonedx-python-lib.
Each component becomes an EvidenceUnit built from its name and package URL,
which is classified against the registry exactly like file-based evidence.
"""

import json
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Union

from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentType
from packageurl import PackageURL

from .exceptions import SBOMParseError
from .logging_config import logger
from .matching import PACKAGE_TARGETS, EvidenceUnit, match_technologies
from .registry import Registry
from .result import DetectionResult

# Exact SBOM file names recognized in a project root (lower-cased)
SBOM_FILE_NAMES = ("bom.xml", "sbom.json", "cyclonedx.json")
SBOM_NAME_PREFIX = "cyclonedx"
SBOM_NAME_SUFFIXES = (".json", ".xml")

# Package URL type -> programming language
PURL_TYPE_LANGUAGES: Dict[str, str] = {
    "maven": "Java",
    "pypi": "Python",
    "npm": "JavaScript",
    "golang": "Go",
    "nuget": "C#",
    "gem": "Ruby",
    "cargo": "Rust",
    "composer": "PHP",
    "hex": "Elixir",
    "pub": "Dart",
    "swift": "Swift",
    "cocoapods": "Swift",
}

# Metadata tool name fragments -> language hint
TOOL_LANGUAGE_HINTS = (
    (("maven", "gradle"), "Java"),
    (("pip", "poetry", "uv"), "Python"),
    (("npm", "yarn", "pnpm"), "JavaScript"),
)

JDK_MARKERS = ("openjdk", "jdk", "temurin", "corretto")


def is_sbom_filename(name: str) -> bool:
    """Check if a file name is a recognized SBOM file name (case-insensitive)."""
    lower = name.lower()
    if lower in SBOM_FILE_NAMES:
        return True
    return lower.startswith(SBOM_NAME_PREFIX) and lower.endswith(SBOM_NAME_SUFFIXES)


def find_sbom_file(root: Path) -> Optional[Path]:
    """
    Find an SBOM file directly inside a project root (non-recursive).

    Args:
        root: Project root directory

    Returns:
        Path of the first recognized SBOM file in name order, or None.
    """
    try:
        candidates = sorted(p for p in root.iterdir() if p.is_file() and is_sbom_filename(p.name))
    except OSError as e:
        logger.debug(f"Error listing files in directory {root}: {e}")
        return None

    if candidates:
        logger.debug(f"Found SBOM file: {candidates[0].name} in directory: {root}")
        return candidates[0]
    return None


def parse_sbom(path: Union[str, Path]) -> Bom:
    """
    Parse a CycloneDX SBOM file in JSON or XML format.

    Args:
        path: SBOM file path

    Returns:
        Parsed Bom

    Raises:
        SBOMParseError: If the file cannot be read or is not a CycloneDX document
    """
    sbom_path = Path(path)
    logger.info(f"Attempting to parse SBOM file: {sbom_path}")

    try:
        content = sbom_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SBOMParseError(f"Cannot read SBOM file {sbom_path}: {e}") from e

    if content.lstrip().startswith("<"):
        return _parse_xml(sbom_path)
    return _parse_json(sbom_path, content)


def _parse_json(sbom_path: Path, content: str) -> Bom:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise SBOMParseError(f"SBOM file {sbom_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or data.get("bomFormat") != "CycloneDX":
        raise SBOMParseError(f"SBOM file {sbom_path} is not a CycloneDX JSON document")

    try:
        bom = Bom.from_json(data)
    except Exception as e:
        raise SBOMParseError(f"Failed to deserialize CycloneDX JSON {sbom_path}: {e}") from e

    logger.info(f"Successfully parsed SBOM as JSON: {sbom_path}")
    return bom


def _parse_xml(sbom_path: Path) -> Bom:
    try:
        with sbom_path.open("r", encoding="utf-8-sig") as f:
            bom = Bom.from_xml(f)
    except Exception as e:
        raise SBOMParseError(f"Failed to deserialize CycloneDX XML {sbom_path}: {e}") from e

    logger.info(f"Successfully parsed SBOM as XML: {sbom_path}")
    return bom


def infer_language_from_purl(purl: Optional[PackageURL]) -> Optional[str]:
    """Infer the programming language of a package from its purl type."""
    if purl is None:
        return None
    language = PURL_TYPE_LANGUAGES.get(purl.type.lower())
    if language is None:
        logger.debug(f"Could not infer language from PURL: {purl}")
    return language


def build_evidence(name: Optional[str], version: Optional[str], purl: Optional[PackageURL]) -> str:
    """Format provenance as "name:version (purl)", omitting missing parts."""
    evidence = name or ""
    if version:
        evidence += f":{version}"
    if purl is not None:
        evidence += f" ({purl.to_string()})"
    return evidence


def _iter_components(components: Iterable[Component]) -> Iterator[Component]:
    for component in components:
        yield component
        if component.components:
            yield from _iter_components(component.components)


class SbomProcessor:
    """Populates a DetectionResult from a parsed CycloneDX BOM.

    Example:
        processor = SbomProcessor(registry)
        processor.process(parse_sbom("bom.json"), result)
    """

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def process(self, bom: Bom, result: DetectionResult) -> int:
        """
        Add languages, frameworks, cloud SDKs, databases, runtimes and
        containers found in the BOM to the result.

        Args:
            bom: Parsed BOM
            result: Aggregator to update

        Returns:
            Number of components processed.
        """
        processed = 0
        for component in _iter_components(bom.components or []):
            try:
                self.process_component(component, result)
                processed += 1
            except Exception as e:
                logger.debug(f"Skipping component {component.name!r}: {e}")

        self._process_metadata_tools(bom, result)
        logger.debug(f"Processed {processed} SBOM component(s)")
        return processed

    def process_component(self, component: Component, result: DetectionResult) -> None:
        name = component.name or ""
        version = component.version
        purl = component.purl
        evidence = build_evidence(name, version, purl)

        language = infer_language_from_purl(purl)
        if language:
            result.add_language(language)

        unit = EvidenceUnit(text=name, purl=purl)
        for match in match_technologies(self._registry, PACKAGE_TARGETS, unit, evidence):
            result.record(match)

        if component.type == ComponentType.CONTAINER:
            result.add_infrastructure("container", evidence)

        runtime = self._infer_runtime(name, purl)
        if runtime:
            result.add_runtime(runtime, evidence)

    @staticmethod
    def _infer_runtime(name: str, purl: Optional[PackageURL]) -> Optional[str]:
        if purl is None:
            return None
        purl_lower = purl.to_string().lower()
        if any(marker in purl_lower for marker in JDK_MARKERS):
            return "JDK"
        if purl.type == "pypi" or "python" in name.lower():
            return "Python"
        if purl.type == "npm" or name.lower() in ("node", "nodejs"):
            return "Node.js"
        return None

    def _process_metadata_tools(self, bom: Bom, result: DetectionResult) -> None:
        """Use the tools that generated the BOM as weak language hints."""
        tools = bom.metadata.tools if bom.metadata else None
        if tools is None:
            return

        descriptions = []
        for tool in tools.tools:
            vendor = getattr(tool.vendor, "name", tool.vendor) or ""
            descriptions.append(f"{vendor} {tool.name or ''}")
        for tool_component in tools.components:
            descriptions.append(f"{tool_component.group or ''} {tool_component.name or ''}")

        for description in descriptions:
            words = set(re.split(r"[\s\-_/]+", description.lower()))
            for markers, language in TOOL_LANGUAGE_HINTS:
                if words.intersection(markers):
                    logger.debug(f"Tool '{description.strip()}' hints at language {language}")
                    result.add_language(language)
