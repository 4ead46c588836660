"""Pytest configuration and shared fixtures for all tests."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest

from tech_detector.registry import Registry

# Small registry used by most tests; the bundled registry is tested separately.
TEST_REGISTRY: Dict[str, Any] = {
    "frameworks": {
        "React": {"keywords": ["react"], "match": "exact"},
        "Express": {"keywords": ["express"], "match": "exact"},
        "Django": {"keywords": ["django"], "match": "exact"},
        "Spring Boot": {"keywords": ["spring-boot"], "sbomMatch": ["org.springframework.boot"]},
    },
    "cloud_sdks": {
        "AWS SDK": {"keywords": ["boto3", "aws-sdk"]},
    },
    "databases": {
        "PostgreSQL": {"keywords": ["postgres", "postgresql"]},
        "Redis": {"keywords": ["redis"]},
    },
    "message_queue": {
        "RabbitMQ": {"keywords": ["rabbitmq"]},
    },
}


def cyclonedx_document(*components: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    """Build a minimal CycloneDX 1.5 JSON document."""
    document: Dict[str, Any] = {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "serialNumber": "urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79",
        "version": 1,
    }
    if components:
        document["components"] = list(components)
    document.update(extra)
    return document


@pytest.fixture
def cyclonedx() -> Callable[..., Dict[str, Any]]:
    return cyclonedx_document


@pytest.fixture
def registry() -> Registry:
    return Registry.from_dict(TEST_REGISTRY)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a project tree from a {relative path: content} mapping.

    Dict or list content is written as JSON.
    """

    def _make(files: Dict[str, Union[str, Dict[str, Any], list]], name: str = "project") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, (dict, list)):
                path.write_text(json.dumps(content), encoding="utf-8")
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make
