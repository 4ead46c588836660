"""DetectionResult aggregator and related data models."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union


class Category(Enum):
    """Technology categories of a DetectionResult.

    Values equal the registry category names.
    """

    FRAMEWORKS = "frameworks"
    RUNTIMES = "runtimes"
    INFRASTRUCTURE = "infrastructure"
    CLOUD_SDKS = "cloud_sdks"
    DATABASES = "databases"

    @property
    def json_field(self) -> str:
        """Field name in the serialized result (camelCase)."""
        head, *rest = self.value.split("_")
        return head + "".join(part.capitalize() for part in rest)


# Order in which categories contribute to the final result
FINAL_RESULT_ORDER = (
    Category.FRAMEWORKS,
    Category.RUNTIMES,
    Category.INFRASTRUCTURE,
    Category.CLOUD_SDKS,
    Category.DATABASES,
)


@dataclass(frozen=True)
class EvidenceMatch:
    """A technology hit with its human-readable provenance."""

    category: Category
    key: str
    evidence: str


@dataclass(frozen=True)
class FinalEntry:
    """One deduplicated (name, version) pair of the final result."""

    name: str
    version: Optional[str] = None

    @classmethod
    def from_key(cls, key: str) -> "FinalEntry":
        """Split a "name:version" key on its first colon."""
        if ":" in key:
            name, version = key.split(":", 1)
            return cls(name=name, version=version)
        return cls(name=key)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "version": self.version}


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class DetectionResult:
    """
    Accumulated technology evidence for one project scan.

    Every evidence processor and detector plugin mutates the same instance
    additively; evidence is never removed or overwritten. finalize() flattens
    the maps into final_result.

    Attributes:
        project_path: Absolute path of the scanned project
        languages: Detected programming languages
        frameworks: Framework key -> evidence strings
        runtimes: Runtime key -> evidence strings
        infrastructure: Infrastructure key -> evidence strings
        cloud_sdks: Cloud SDK key -> evidence strings
        databases: Database key -> evidence strings
        scanned_at: ISO-8601 UTC timestamp of the scan start
        final_result: Deduplicated (name, version) pairs, set by finalize()
    """

    project_path: str = ""
    languages: Set[str] = field(default_factory=set)
    frameworks: Dict[str, List[str]] = field(default_factory=dict)
    runtimes: Dict[str, List[str]] = field(default_factory=dict)
    infrastructure: Dict[str, List[str]] = field(default_factory=dict)
    cloud_sdks: Dict[str, List[str]] = field(default_factory=dict)
    databases: Dict[str, List[str]] = field(default_factory=dict)
    scanned_at: str = field(default_factory=_utc_timestamp)
    final_result: List[FinalEntry] = field(default_factory=list)

    def category_map(self, category: Union[Category, str]) -> Dict[str, List[str]]:
        """Get the evidence map of a category."""
        return getattr(self, Category(category).value)

    def add(self, category: Union[Category, str], key: str, evidence: str) -> None:
        """Append evidence for a technology key. Duplicates are kept as an audit trail."""
        self.category_map(category).setdefault(key, []).append(evidence)

    def record(self, match: EvidenceMatch) -> None:
        self.add(match.category, match.key, match.evidence)

    def add_language(self, language: str) -> None:
        self.languages.add(language)

    def add_framework(self, key: str, evidence: str) -> None:
        self.add(Category.FRAMEWORKS, key, evidence)

    def add_runtime(self, key: str, evidence: str) -> None:
        self.add(Category.RUNTIMES, key, evidence)

    def add_infrastructure(self, key: str, evidence: str) -> None:
        self.add(Category.INFRASTRUCTURE, key, evidence)

    def add_cloud_sdk(self, key: str, evidence: str) -> None:
        self.add(Category.CLOUD_SDKS, key, evidence)

    def add_database(self, key: str, evidence: str) -> None:
        self.add(Category.DATABASES, key, evidence)

    def has_language(self) -> bool:
        return bool(self.languages)

    def has_stack(self) -> bool:
        """True if any framework, runtime or infrastructure was detected."""
        return bool(self.frameworks or self.runtimes or self.infrastructure)

    def is_complete(self) -> bool:
        """True when a language and some stack evidence are both present."""
        return self.has_language() and self.has_stack()

    def finalize(self) -> List[FinalEntry]:
        """
        Flatten languages and category maps into the deduplicated final result.

        Languages come first (sorted), followed by frameworks, runtimes,
        infrastructure, cloud SDKs and databases in insertion order. Keys are
        split into name and version on their first colon. Calling this again
        yields the same list.

        Returns:
            The final result, also stored on the instance.
        """
        seen: Set[Tuple[str, Optional[str]]] = set()
        entries: List[FinalEntry] = []

        def _append(entry: FinalEntry) -> None:
            identity = (entry.name, entry.version)
            if identity not in seen:
                seen.add(identity)
                entries.append(entry)

        for language in sorted(self.languages):
            _append(FinalEntry(name=language))

        for category in FINAL_RESULT_ORDER:
            for key in self.category_map(category):
                _append(FinalEntry.from_key(key))

        self.final_result = entries
        return entries

    def summary(self) -> Dict[str, int]:
        """Count of detected items per field, for logging."""
        counts = {"languages": len(self.languages)}
        for category in FINAL_RESULT_ORDER:
            counts[category.value] = len(self.category_map(category))
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the public result document."""
        data: Dict[str, Any] = {
            "projectPath": self.project_path,
            "languages": sorted(self.languages),
        }
        for category in FINAL_RESULT_ORDER:
            data[category.json_field] = {key: list(values) for key, values in self.category_map(category).items()}
        data["scannedAt"] = self.scanned_at
        data["finalResult"] = [entry.to_dict() for entry in self.final_result]
        return data

    def to_json(self, pretty: bool = True) -> str:
        return json.dumps(self.to_dict(), indent=2 if pretty else None)
