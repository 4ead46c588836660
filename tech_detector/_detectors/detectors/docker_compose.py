"""Docker Compose detector."""

import re
from pathlib import Path
from typing import Dict

import yaml

from ...logging_config import logger
from ...matching import EvidenceUnit, match_technologies
from ...registry import Registry
from ...result import Category, DetectionResult
from ..utils import read_text, relative_path

_COMPOSE_NAME_RE = re.compile(r"^(docker-)?compose([.\-][\w.\-]*)?\.ya?ml$", re.IGNORECASE)

# Service images are matched against these registry categories
IMAGE_TARGETS: Dict[str, Category] = {
    "databases": Category.DATABASES,
    "message_queue": Category.INFRASTRUCTURE,
}


def is_compose_file(name: str) -> bool:
    return bool(_COMPOSE_NAME_RE.match(name))


class DockerComposeDetector:
    """Records Docker Compose usage and classifies service images (e.g. postgres:16)."""

    name = "docker-compose"
    infrastructure = True

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if not is_compose_file(file.name):
            return

        location = relative_path(file, project_root)
        try:
            data = yaml.safe_load(read_text(file))
        except yaml.YAMLError as e:
            logger.debug(f"Malformed compose file {file}: {e}")
            return

        services = data.get("services") if isinstance(data, dict) else None
        if not isinstance(services, dict):
            return

        result.add_infrastructure("Docker Compose", location)

        targets = {name: target for name, target in IMAGE_TARGETS.items() if self._registry.has_category(name)}
        for service_name, service in services.items():
            if not isinstance(service, dict) or not isinstance(service.get("image"), str):
                continue
            image = service["image"]
            unit = EvidenceUnit(text=image)
            evidence = f"{location}: service {service_name} image {image}"
            for match in match_technologies(self._registry, targets, unit, evidence):
                result.record(match)
