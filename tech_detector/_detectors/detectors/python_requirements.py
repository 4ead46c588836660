"""Detector for Python dependency manifests (requirements.txt, Pipfile, pyproject.toml)."""

import re
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from packageurl import PackageURL

from ...matching import EvidenceUnit, match_technologies
from ...registry import Registry
from ...result import Category, DetectionResult
from ..utils import read_text

# Registry category -> result category. Optional categories are skipped when absent.
PYTHON_TARGETS: Dict[str, Category] = {
    "frameworks": Category.FRAMEWORKS,
    "cloud_sdks": Category.CLOUD_SDKS,
    "databases": Category.DATABASES,
    "ai_ml": Category.FRAMEWORKS,
    "vector_databases": Category.DATABASES,
    "testing": Category.FRAMEWORKS,
    "orm": Category.FRAMEWORKS,
    "message_queue": Category.INFRASTRUCTURE,
}

_REQUIREMENT_RE = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*"
    r"(?:(?P<op>===|==|~=|!=|>=|<=|>|<)\s*(?P<version>[^\s,;#]+))?"
)


# `name = "spec"` or `name = {version = ...}` entries of TOML dependency tables
_TABLE_ENTRY_RE = re.compile(r"^['\"]?([A-Za-z0-9][A-Za-z0-9._-]*)['\"]?\s*=")


def is_python_manifest(name: str) -> bool:
    lower = name.lower()
    return (lower.startswith("requirements") and lower.endswith(".txt")) or lower in ("pipfile", "pyproject.toml")


def parse_requirement(line: str) -> Optional[Tuple[str, Optional[str]]]:
    """
    Parse a PEP 508 requirement line into (name, pinned version).

    The version is only returned for "==" / "===" pins.

    Examples:
        "Django==4.2.1" -> ("Django", "4.2.1")
        "requests>=2"   -> ("requests", None)
        "-r base.txt"   -> None
    """
    match = _REQUIREMENT_RE.match(line)
    if not match:
        return None
    version = match.group("version") if match.group("op") in ("==", "===") else None
    return match.group("name"), version


def pypi_purl(name: str, version: Optional[str]) -> PackageURL:
    normalized = re.sub(r"[-_.]+", "-", name).lower()
    return PackageURL(type="pypi", name=normalized, version=version)


def _is_dependency_table(header: str) -> bool:
    """Pipfile [packages] / [dev-packages] and Poetry dependency tables."""
    return header in ("packages", "dev-packages") or (
        header.startswith("tool.poetry") and header.endswith("dependencies")
    )


def _iter_lines(content: str) -> Iterator[Tuple[str, bool]]:
    """Yield (line, in_dependency_table) for every non-comment line."""
    in_table = False
    for raw in content.splitlines():
        line = raw.split(" #", 1)[0].strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]") and not line.startswith("[["):
            in_table = _is_dependency_table(line.strip("[] ").lower())
            continue
        if line.startswith("["):
            continue
        yield line, in_table


class PythonRequirementsDetector:
    """
    Classifies dependency lines of Python manifests against the registry.

    Every non-comment line is an EvidenceUnit whose text is the line itself.
    Requirement specifiers (requirements files, quoted PEP 621 entries and
    Pipfile or Poetry dependency tables) also carry a pypi purl.
    """

    name = "python-requirements"
    infrastructure = False

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if not is_python_manifest(file.name):
            return

        is_requirements_file = file.name.lower().endswith(".txt")
        targets = {name: target for name, target in PYTHON_TARGETS.items() if self._registry.has_category(name)}

        for line, in_table in _iter_lines(read_text(file)):
            purl = None
            if is_requirements_file or line.startswith(("'", '"')):
                requirement = parse_requirement(line.strip("'\", "))
                if requirement:
                    purl = pypi_purl(*requirement)
            elif in_table:
                table_entry = _TABLE_ENTRY_RE.match(line)
                if table_entry and table_entry.group(1).lower() != "python":
                    purl = pypi_purl(table_entry.group(1), None)

            evidence = f"{file.name}: {line.rstrip(',')}"
            unit = EvidenceUnit(text=line, purl=purl)
            for match in match_technologies(self._registry, targets, unit, evidence):
                result.record(match)
