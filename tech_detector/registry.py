"""Technology registry loading.

The registry is a JSON document keyed by category name ("frameworks",
"databases", "cloud_sdks", ...). Each category maps a technology key to an
object with pattern groups and an optional match mode:

    {
        "frameworks": {
            "react": {"keywords": ["react"], "sbomMatch": ["pkg:npm/react"], "match": "exact"}
        }
    }

The raw document is parsed once into immutable TechnologyRule objects and
shared read-only by every matcher and processor.

Usage:
    from tech_detector.registry import load_registry

    registry = load_registry()  # bundled registry
    registry = load_registry("custom-registry.json")
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import jsonschema

from .exceptions import RegistryError
from .logging_config import logger

PACKAGE_DIR = Path(__file__).parent
DEFAULT_REGISTRY_PATH = PACKAGE_DIR / "data" / "registry.json"

# Pattern group field names, in evaluation priority order.
# "indicators" and "sbomIdentifiers" are accepted for older registries.
KEYWORD_FIELDS = ("patterns", "keywords", "indicators")
SBOM_IDENTIFIER_FIELDS = ("sbomMatch", "sbomIdentifiers")
FILE_FIELDS = ("files",)

REGISTRY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {"type": "object"},
    },
}


class MatchMode(Enum):
    """How a technology's patterns are compared against evidence."""

    CONTAINS = "contains"
    EXACT = "exact"
    REGEX = "regex"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "MatchMode | None":
        """Parse a registry "match" value; None for unknown values."""
        if value is None:
            return cls.CONTAINS
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class TechnologyRule:
    """Detection rule for a single technology."""

    key: str
    keywords: Tuple[str, ...] = ()
    sbom_identifiers: Tuple[str, ...] = ()
    files: Tuple[str, ...] = ()
    match: MatchMode = MatchMode.CONTAINS

    @property
    def pattern_groups(self) -> Tuple[Tuple[str, ...], ...]:
        """Pattern groups in evaluation order: keywords, SBOM identifiers, file names."""
        return (self.keywords, self.sbom_identifiers, self.files)

    @property
    def patterns(self) -> Tuple[str, ...]:
        """All patterns flattened in evaluation order."""
        return self.keywords + self.sbom_identifiers + self.files

    @classmethod
    def from_dict(cls, key: str, data: Mapping[str, Any]) -> "TechnologyRule":
        """Build a rule from its registry entry, dropping malformed patterns."""
        match = MatchMode.from_value(data.get("match"))
        if match is None:
            logger.warning(f"Unknown match mode {data.get('match')!r} for technology '{key}', using 'contains'")
            match = MatchMode.CONTAINS

        return cls(
            key=key,
            keywords=_collect_patterns(key, data, KEYWORD_FIELDS),
            sbom_identifiers=_collect_patterns(key, data, SBOM_IDENTIFIER_FIELDS),
            files=_collect_patterns(key, data, FILE_FIELDS),
            match=match,
        )


def _collect_patterns(key: str, data: Mapping[str, Any], fields: Tuple[str, ...]) -> Tuple[str, ...]:
    patterns: List[str] = []
    for field_name in fields:
        values = data.get(field_name)
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        if not isinstance(values, list):
            logger.warning(f"Ignoring non-list '{field_name}' for technology '{key}'")
            continue
        for value in values:
            if isinstance(value, str) and value.strip():
                patterns.append(value)
            else:
                logger.debug(f"Dropping invalid pattern {value!r} for technology '{key}'")
    return tuple(patterns)


@dataclass(frozen=True)
class Registry:
    """Immutable registry of technology rules grouped by category.

    Categories and technologies keep their document order, which defines the
    order of match results.
    """

    _categories: Mapping[str, Mapping[str, TechnologyRule]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Registry":
        """
        Build a registry from a parsed registry document.

        Args:
            data: Parsed JSON document

        Returns:
            Registry instance

        Raises:
            RegistryError: If the document does not have the registry shape
        """
        try:
            jsonschema.validate(instance=data, schema=REGISTRY_SCHEMA)
        except jsonschema.ValidationError as e:
            raise RegistryError(f"Invalid registry document: {e.message}") from e

        categories: Dict[str, Mapping[str, TechnologyRule]] = {}
        for category_name, technologies in data.items():
            rules: Dict[str, TechnologyRule] = {}
            for key, entry in technologies.items():
                rules[key] = TechnologyRule.from_dict(key, entry)
            categories[category_name] = MappingProxyType(rules)

        return cls(MappingProxyType(categories))

    @property
    def categories(self) -> List[str]:
        """Names of all categories in document order."""
        return list(self._categories)

    def category(self, name: str) -> Mapping[str, TechnologyRule]:
        """Get the rules of a category; empty for a missing category."""
        return self._categories.get(name, MappingProxyType({}))

    def has_category(self, name: str) -> bool:
        return name in self._categories

    def __iter__(self) -> Iterator[str]:
        return iter(self._categories)

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._categories.values())


def load_registry(path: Optional[Union[str, Path]] = None) -> Registry:
    """
    Load and parse a registry document.

    Args:
        path: Registry JSON file. Defaults to the bundled registry.

    Returns:
        Parsed Registry

    Raises:
        RegistryError: If the file is missing, unreadable or malformed
    """
    registry_path = Path(path) if path else DEFAULT_REGISTRY_PATH
    logger.info(f"Loading technology registry from {registry_path}")

    try:
        with registry_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise RegistryError(f"Registry file not found: {registry_path}") from e
    except OSError as e:
        raise RegistryError(f"Cannot read registry file {registry_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Registry file {registry_path} is not valid JSON: {e}") from e

    registry = Registry.from_dict(data)
    logger.debug(f"Registry loaded with {len(registry)} technologies in categories: {registry.categories}")
    return registry
