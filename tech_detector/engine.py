"""SBOM-first detection engine.

A scan runs once through these states:

1. Locate: look for an SBOM file directly in the project root.
2. Ingest: parse it and feed its components to the SbomProcessor. A parse
   or processing failure falls through to the file-based pass.
3. Assess: if the result already holds a language and a framework, runtime
   or infrastructure entry, only infrastructure plugins walk the tree
   (SBOMs rarely describe container images or IaC). Otherwise every plugin
   runs.
4. Finalize: reduce the result to its deduplicated summary.

Usage:
    from tech_detector.engine import SbomFirstEngine
    from tech_detector.registry import load_registry

    engine = SbomFirstEngine(load_registry())
    result = engine.scan_project("path/to/project")
    print(result.to_json())
"""

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ._detectors import DEFAULT_MAX_FILES, FileWalker, PluginRegistry, create_default_registry
from .exceptions import SBOMParseError, ScanError
from .logging_config import logger
from .registry import Registry
from .result import DetectionResult
from .sbom import SbomProcessor, find_sbom_file, parse_sbom

PathLike = Union[str, Path]


class SbomFirstEngine:
    """
    Orchestrates SBOM ingestion and file-based detection for project scans.

    The registry and plugins are shared read-only between scans; every scan
    owns its own DetectionResult, so independent projects can be scanned
    concurrently.
    """

    def __init__(
        self,
        registry: Registry,
        plugins: Optional[PluginRegistry] = None,
        max_files: int = DEFAULT_MAX_FILES,
    ) -> None:
        self._registry = registry
        self._plugins = plugins if plugins is not None else create_default_registry(registry)
        self._processor = SbomProcessor(registry)
        self._walker = FileWalker(self._plugins.plugins, max_files=max_files)
        logger.debug(f"SbomFirstEngine initialized with {len(self._plugins)} plugin(s): {self._plugins.names}")

    @property
    def plugins(self) -> PluginRegistry:
        return self._plugins

    def scan_project(self, path: PathLike) -> DetectionResult:
        """
        Scan one project root.

        Args:
            path: Project root directory

        Returns:
            Finalized DetectionResult

        Raises:
            ScanError: If the path does not exist, is not a directory or cannot be read
        """
        root = Path(path).resolve()
        if not root.is_dir():
            raise ScanError(f"Cannot scan '{root}': path does not exist or is not a directory.")
        try:
            with os.scandir(root) as entries:
                next(entries, None)
        except OSError as e:
            raise ScanError(f"Cannot scan '{root}': directory is not readable: {e}") from e

        result = DetectionResult(project_path=str(root))
        logger.info(f"Starting SBOM-first scan for project: {root}")

        sbom_processed = self._ingest_sbom(root, result)

        if sbom_processed and result.is_complete():
            logger.info("SBOM analysis complete, running infrastructure detection only")
            self._walker.walk(root, result, plugins=self._plugins.infrastructure_plugins)
        else:
            logger.info("SBOM analysis incomplete, running full file-based detection")
            self._walker.walk(root, result)

        result.finalize()
        logger.info(f"Scan completed for {root}: {result.summary()}")
        return result

    def _ingest_sbom(self, root: Path, result: DetectionResult) -> bool:
        sbom_file = find_sbom_file(root)
        if sbom_file is None:
            logger.debug(f"No SBOM file found in project root: {root}")
            return False

        logger.info(f"Found SBOM file: {sbom_file.name}")
        try:
            bom = parse_sbom(sbom_file)
        except SBOMParseError as e:
            logger.warning(f"Failed to parse SBOM file {sbom_file}, falling back to file-based detection: {e}")
            return False

        try:
            self._processor.process(bom, result)
        except Exception as e:
            logger.warning(f"Failed to process SBOM file {sbom_file}, falling back to file-based detection: {e}")
            return False
        logger.debug(f"Processed SBOM - languages: {sorted(result.languages)}, frameworks: {list(result.frameworks)}")
        return True

    def scan_many(self, paths: Sequence[PathLike], max_workers: int = 1) -> Dict[str, DetectionResult]:
        """
        Scan several independent project roots.

        A path that fails to scan is logged and left out; the others are
        still reported.

        Args:
            paths: Project roots
            max_workers: Number of projects scanned concurrently

        Returns:
            Mapping of path (as given) to result, in input order.
        """
        keys = [str(p) for p in paths]

        def _scan(path: PathLike) -> Optional[DetectionResult]:
            try:
                return self.scan_project(path)
            except ScanError as e:
                logger.warning(f"Skipping {path}: {e}")
                return None

        if max_workers > 1 and len(keys) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                scanned: List[Optional[DetectionResult]] = list(executor.map(_scan, paths))
        else:
            scanned = [_scan(p) for p in paths]

        return {key: result for key, result in zip(keys, scanned) if result is not None}

    def scan_aggregate(self, root: PathLike, max_workers: int = 1) -> Dict[str, DetectionResult]:
        """
        Scan every immediate subdirectory of root as its own project.

        Args:
            root: Directory holding several projects
            max_workers: Number of projects scanned concurrently

        Returns:
            Mapping of subdirectory name to result, sorted by name.

        Raises:
            ScanError: If root is not a directory
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise ScanError(f"Path must be a directory for aggregate mode: {root_path}")

        try:
            children = sorted(p for p in root_path.iterdir() if p.is_dir())
        except OSError as e:
            raise ScanError(f"Cannot list directory {root_path}: {e}") from e

        logger.info(f"Aggregate mode: scanning {len(children)} subdirectories in {root_path}")
        by_path = self.scan_many(children, max_workers=max_workers)
        return {Path(path).name: result for path, result in by_path.items()}
