"""Detector for SBOM files below the project root."""

from pathlib import Path

from ...registry import Registry
from ...result import DetectionResult
from ...sbom import SbomProcessor, is_sbom_filename, parse_sbom


class NestedSbomDetector:
    """
    Feeds SBOMs found in subdirectories (e.g. per-module BOMs) to the
    SbomProcessor. The SBOM in the project root itself is handled by the
    engine before the file walk and skipped here.
    """

    name = "nested-sbom"
    infrastructure = False

    def __init__(self, registry: Registry) -> None:
        self._processor = SbomProcessor(registry)

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if not is_sbom_filename(file.name) or file.parent == project_root:
            return
        self._processor.process(parse_sbom(file), result)
