"""Dockerfile runtime and infrastructure detector."""

import re
from pathlib import Path
from typing import Optional

from ...logging_config import logger
from ...result import DetectionResult
from ..utils import read_text, relative_path

_FROM_RE = re.compile(r"^\s*FROM\s+(?:--platform=\S+\s+)?(\S+)", re.IGNORECASE | re.MULTILINE)

JDK_IMAGE_MARKERS = ("openjdk", "temurin", "corretto", "jdk")

# Base image name prefix -> runtime
IMAGE_RUNTIMES = (
    ("python", "Python"),
    ("node", "Node.js"),
    ("golang", "Go"),
)


def is_dockerfile(name: str) -> bool:
    lower = name.lower()
    return lower.startswith("dockerfile") or lower.endswith(".dockerfile")


def runtime_for_image(image: str) -> Optional[str]:
    """Map a base image reference such as "docker.io/library/python:3.11-slim" to a runtime."""
    image_name = image.lower().rsplit("/", 1)[-1]
    if any(marker in image_name for marker in JDK_IMAGE_MARKERS):
        return "JDK"
    for prefix, runtime in IMAGE_RUNTIMES:
        if image_name.startswith(prefix):
            return runtime
    return None


class DockerfileDetector:
    """Reads the first FROM directive of a Dockerfile."""

    name = "dockerfile"
    infrastructure = True

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if not is_dockerfile(file.name):
            return

        logger.debug(f"Processing Dockerfile: {file}")
        match = _FROM_RE.search(read_text(file))
        if not match:
            return

        base = match.group(1)
        runtime = runtime_for_image(base)
        if runtime:
            result.add_runtime(runtime, f"Docker base: {base}")
        result.add_infrastructure("Docker", relative_path(file, project_root))
