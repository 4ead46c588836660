"""Pattern and category matching against the technology registry."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Mapping, Optional, Set

from packageurl import PackageURL

from .logging_config import logger
from .registry import MatchMode, Registry, TechnologyRule
from .result import Category, EvidenceMatch

# Registry categories consulted for package-level evidence
PACKAGE_TARGETS: Mapping[str, Category] = {
    "frameworks": Category.FRAMEWORKS,
    "cloud_sdks": Category.CLOUD_SDKS,
    "databases": Category.DATABASES,
}


@dataclass(frozen=True)
class EvidenceUnit:
    """A single piece of evidence to classify.

    Attributes:
        text: Free text such as a component name or a manifest line
        purl: Optional package URL identifying the package
    """

    text: str = ""
    purl: Optional[PackageURL] = None

    @property
    def purl_string(self) -> str:
        return self.purl.to_string() if self.purl is not None else ""

    @property
    def haystack(self) -> str:
        """Lower-cased concatenation of free text and purl string."""
        return f"{self.text} {self.purl_string}".strip().lower()


@lru_cache(maxsize=1024)
def _compile(pattern: str) -> Optional["re.Pattern[str]"]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.debug(f"Invalid regex pattern {pattern!r}, falling back to substring match: {e}")
        return None


def _exact_forms(purl: PackageURL) -> Set[str]:
    """All granularities a rule author can pin an exact pattern to."""
    forms = {purl.to_string(), purl.name, purl.type}
    versionless = PackageURL(type=purl.type, namespace=purl.namespace, name=purl.name)
    forms.add(versionless.to_string())
    if purl.namespace:
        forms.add(purl.namespace)
        forms.add(f"{purl.namespace}/{purl.name}")
        forms.add(f"{purl.type}:{purl.namespace}")
        if purl.version:
            forms.add(f"{purl.namespace}/{purl.name}@{purl.version}")
    return {form.lower() for form in forms if form}


def matches(text: Optional[str], purl: Optional[PackageURL], pattern: str, mode: MatchMode) -> bool:
    """
    Check whether one pattern matches a piece of evidence.

    Args:
        text: Free text (component name, manifest line, file content)
        purl: Optional package URL
        pattern: Pattern from the registry
        mode: Match mode of the technology

    Returns:
        True if the pattern matches.
    """
    if not pattern or not pattern.strip():
        return False

    unit = EvidenceUnit(text=text or "", purl=purl)
    needle = pattern.lower()

    if mode is MatchMode.EXACT:
        if purl is not None:
            return needle.strip() in _exact_forms(purl)
        return needle.strip() == unit.text.strip().lower()

    if mode is MatchMode.REGEX:
        compiled = _compile(pattern)
        if compiled is not None:
            return compiled.search(unit.haystack) is not None

    return needle in unit.haystack


def rule_matches(rule: TechnologyRule, unit: EvidenceUnit) -> bool:
    """Check a rule's pattern groups in priority order, stopping at the first hit."""
    for group in rule.pattern_groups:
        for pattern in group:
            if matches(unit.text, unit.purl, pattern, rule.match):
                return True
    return False


def match_category(registry: Registry, category: str, unit: EvidenceUnit) -> List[str]:
    """
    Match an evidence unit against every technology in a registry category.

    Args:
        registry: Loaded registry
        category: Category name, e.g. "frameworks"
        unit: Evidence to classify

    Returns:
        Matching technology keys in registry order, each at most once.
        Empty if the category does not exist.
    """
    matched: List[str] = []
    for key, rule in registry.category(category).items():
        if rule_matches(rule, unit):
            matched.append(key)
    if matched:
        logger.debug(f"Matched {category} {matched} for text={unit.text!r}, purl={unit.purl_string!r}")
    return matched


def match_technologies(
    registry: Registry,
    targets: Mapping[str, Category],
    unit: EvidenceUnit,
    evidence: str,
) -> List[EvidenceMatch]:
    """
    Match a unit against several registry categories.

    Args:
        registry: Loaded registry
        targets: Registry category name -> result category receiving its hits
        unit: Evidence to classify
        evidence: Provenance string attached to every hit

    Returns:
        One EvidenceMatch per matched technology.
    """
    hits: List[EvidenceMatch] = []
    for registry_category, target in targets.items():
        for key in match_category(registry, registry_category, unit):
            hits.append(EvidenceMatch(category=target, key=key, evidence=evidence))
    return hits
