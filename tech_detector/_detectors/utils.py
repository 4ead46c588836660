"""Shared helpers for detector plugins."""

from pathlib import Path

# Files above this size are only sampled
LARGE_FILE_BYTES = 200_000
HEAD_BYTES = 32 * 1024


def relative_path(file: Path, project_root: Path) -> str:
    """Path of a file relative to the project root, for evidence strings."""
    try:
        return file.relative_to(project_root).as_posix()
    except ValueError:
        return str(file)


def read_text(file: Path, sample_large: bool = False) -> str:
    """
    Read a text file as UTF-8, replacing undecodable bytes.

    Args:
        file: File to read
        sample_large: Only read the first HEAD_BYTES of files larger than LARGE_FILE_BYTES

    Returns:
        File content.
    """
    if sample_large and file.stat().st_size > LARGE_FILE_BYTES:
        with file.open("rb") as f:
            return f.read(HEAD_BYTES).decode("utf-8", errors="replace")
    return file.read_text(encoding="utf-8", errors="replace")
