"""Detector for npm package.json manifests."""

import json
import re
from pathlib import Path
from typing import Dict, Optional

from packageurl import PackageURL

from ...logging_config import logger
from ...matching import PACKAGE_TARGETS, EvidenceUnit, match_technologies
from ...registry import Registry
from ...result import DetectionResult

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")

# Dependencies implying the project is written in TypeScript
TYPESCRIPT_MARKERS = ("typescript", "@angular/core", "@nestjs/core")

_VERSION_RE = re.compile(r"^[\^~>=<v\s]*(\d+(?:\.\d+)*(?:[-+][0-9A-Za-z.\-]+)?)$")


def clean_npm_version(spec: str) -> Optional[str]:
    """Extract a concrete version from an npm range like "^18.2.0"; None for tags, URLs or ranges."""
    match = _VERSION_RE.match(spec.strip())
    return match.group(1) if match else None


def npm_purl(package: str, version_spec: Optional[str]) -> PackageURL:
    """Build an npm purl, splitting "@scope/name" into namespace and name."""
    namespace = None
    name = package
    if package.startswith("@") and "/" in package:
        namespace, name = package.split("/", 1)
    version = clean_npm_version(version_spec) if isinstance(version_spec, str) else None
    return PackageURL(type="npm", namespace=namespace, name=name, version=version)


class PackageJsonDetector:
    """
    Classifies every declared npm dependency against the registry.

    Each dependency becomes an EvidenceUnit with the package name as text
    and an npm purl, so exact-mode rules can pin to scope or name.
    """

    name = "package-json"
    infrastructure = False

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if file.name.lower() != "package.json":
            return

        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.debug(f"Malformed package.json at {file}: {e}")
            return
        if not isinstance(data, dict):
            return

        result.add_runtime("Node.js", "package.json detected")
        result.add_language("JavaScript")

        dependencies: Dict[str, str] = {}
        for section in DEPENDENCY_SECTIONS:
            deps = data.get(section)
            if isinstance(deps, dict):
                for package, spec in deps.items():
                    dependencies.setdefault(package, spec if isinstance(spec, str) else "")

        for package, spec in dependencies.items():
            if package in TYPESCRIPT_MARKERS:
                result.add_language("TypeScript")

            try:
                purl = npm_purl(package, spec)
            except ValueError as e:
                logger.debug(f"Cannot build purl for npm package {package!r}: {e}")
                purl = None

            evidence = f"package.json: {package}@{spec}" if spec else f"package.json: {package}"
            unit = EvidenceUnit(text=package, purl=purl)
            for match in match_technologies(self._registry, PACKAGE_TARGETS, unit, evidence):
                result.record(match)
