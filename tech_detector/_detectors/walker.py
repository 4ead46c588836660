"""Bounded project tree walker and plugin dispatcher."""

import os
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Optional

from ..logging_config import logger
from ..result import DetectionResult
from .protocol import DetectorPlugin

DEFAULT_MAX_FILES = 20000

# Directory names that only hold VCS metadata, dependency caches, build output or IDE settings
EXCLUDED_DIRS: FrozenSet[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "bower_components",
        ".venv",
        "venv",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".tox",
        ".nox",
        "target",
        "build",
        "dist",
        "out",
        ".gradle",
        ".idea",
        ".vscode",
        ".terraform",
    }
)


def iter_project_files(
    root: Path,
    max_files: int = DEFAULT_MAX_FILES,
    excluded_dirs: Iterable[str] = EXCLUDED_DIRS,
) -> Iterator[Path]:
    """
    Yield regular files below a project root.

    Symbolic links to directories are not followed and excluded directory
    names are pruned at any depth. Iteration stops after max_files files.

    Args:
        root: Project root directory
        max_files: Maximum number of files to yield
        excluded_dirs: Directory names to skip

    Yields:
        File paths in a stable (sorted per directory) order.
    """
    excluded = frozenset(excluded_dirs)
    count = 0

    def _on_error(error: OSError) -> None:
        logger.debug(f"Cannot read directory {error.filename}: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if not path.is_file():
                continue
            if count >= max_files:
                logger.warning(f"File limit of {max_files} reached while walking {root}, remaining files skipped")
                return
            count += 1
            yield path


class FileWalker:
    """Walks a project tree and dispatches every file to every plugin.

    A plugin raising for a file is logged and skipped; the walk always
    continues with the next plugin and file.

    Example:
        walker = FileWalker(plugin_registry.plugins)
        visited = walker.walk(Path("my-project"), result)
    """

    def __init__(
        self,
        plugins: List[DetectorPlugin],
        max_files: int = DEFAULT_MAX_FILES,
        excluded_dirs: Iterable[str] = EXCLUDED_DIRS,
    ) -> None:
        self._plugins = list(plugins)
        self._max_files = max_files
        self._excluded_dirs = frozenset(excluded_dirs)

    @property
    def plugins(self) -> List[DetectorPlugin]:
        return list(self._plugins)

    def walk(
        self,
        root: Path,
        result: DetectionResult,
        plugins: Optional[List[DetectorPlugin]] = None,
    ) -> int:
        """
        Run plugins over every file below root.

        Args:
            root: Project root directory
            result: Aggregator shared by all plugins
            plugins: Restrict the run to these plugins (default: all)

        Returns:
            Number of files visited.
        """
        active = self._plugins if plugins is None else list(plugins)
        visited = 0

        for path in iter_project_files(root, self._max_files, self._excluded_dirs):
            visited += 1
            for plugin in active:
                try:
                    plugin.inspect(path, root, result)
                except Exception as e:
                    logger.debug(f"Plugin {plugin.name} failed for file {path}: {e}")

        logger.debug(f"File-based detection visited {visited} file(s) with {len(active)} plugin(s)")
        return visited
