"""Kubernetes manifest and Helm chart detector."""

from pathlib import Path

import yaml

from ...logging_config import logger
from ...result import DetectionResult
from ..utils import LARGE_FILE_BYTES, read_text, relative_path
from .docker_compose import is_compose_file


class KubernetesDetector:
    """Detects Kubernetes manifests (apiVersion + kind) and Helm charts."""

    name = "kubernetes"
    infrastructure = True

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if not name.endswith((".yaml", ".yml")) or is_compose_file(name):
            return

        location = relative_path(file, project_root)
        if name == "chart.yaml":
            result.add_infrastructure("Helm", location)
            return

        if file.stat().st_size > LARGE_FILE_BYTES:
            return

        try:
            documents = list(yaml.safe_load_all(read_text(file)))
        except yaml.YAMLError as e:
            logger.debug(f"Skipping unparsable YAML {file}: {e}")
            return

        for document in documents:
            if isinstance(document, dict) and "apiVersion" in document and "kind" in document:
                result.add_infrastructure("Kubernetes", f"{location} ({document['kind']})")
                return
