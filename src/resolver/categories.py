"""Node "exports" compatibility categories and their version ranges.

Each category emulates the exports-map rules of a span of node releases. The
version intervals are half-open ``[low, high)``; a missing ``high`` means the
category is still current.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import semantic_version

from .errors import InvalidOptionsError


class Category(str, Enum):
    """Exports-map eras, oldest first."""

    PRE_EXPORTS = "pre-exports"
    BROKEN = "broken"
    EXPERIMENTAL = "experimental"
    CONDITIONS = "conditions"
    BROKEN_DIR_SLASH_CONDITIONS = "broken-dir-slash-conditions"
    PATTERNS = "patterns"
    PATTERN_TRAILERS = "pattern-trailers"
    PATTERN_TRAILERS_NO_DIR_SLASH = "pattern-trailers-no-dir-slash"


_INTERVALS: Dict[Category, List[Tuple[str, Optional[str]]]] = {
    Category.PRE_EXPORTS: [("0.0.0", "12.7.0"), ("13.0.0", "13.2.0")],
    Category.BROKEN: [("12.7.0", "12.16.0"), ("13.2.0", "13.7.0")],
    Category.EXPERIMENTAL: [("12.16.0", "12.17.0"), ("13.7.0", "13.13.0")],
    Category.CONDITIONS: [("12.17.0", "12.20.0"), ("13.13.0", "14.13.0")],
    Category.BROKEN_DIR_SLASH_CONDITIONS: [("14.13.0", "14.14.0"), ("15.0.0", "15.1.0")],
    Category.PATTERNS: [("12.20.0", "13.0.0"), ("14.14.0", "14.19.0"), ("15.1.0", "16.9.0")],
    Category.PATTERN_TRAILERS: [("14.19.0", "15.0.0"), ("16.9.0", "17.0.0")],
    Category.PATTERN_TRAILERS_NO_DIR_SLASH: [("17.0.0", None)],
}

_VERSION_LITERAL = re.compile(r"\d+(?:\.\d+){0,2}")


@dataclass(frozen=True)
class CategoryFeatures:
    """What an era's exports resolution supports."""

    exports: bool
    object_exports: bool
    default_condition_only: bool
    dir_slash_keys: bool


_FEATURES: Dict[Category, CategoryFeatures] = {
    Category.PRE_EXPORTS: CategoryFeatures(False, False, False, False),
    Category.BROKEN: CategoryFeatures(True, False, False, False),
    Category.EXPERIMENTAL: CategoryFeatures(True, True, True, True),
    Category.CONDITIONS: CategoryFeatures(True, True, False, True),
    Category.BROKEN_DIR_SLASH_CONDITIONS: CategoryFeatures(True, True, False, False),
    Category.PATTERNS: CategoryFeatures(True, True, False, True),
    Category.PATTERN_TRAILERS: CategoryFeatures(True, True, False, True),
    Category.PATTERN_TRAILERS_NO_DIR_SLASH: CategoryFeatures(True, True, False, False),
}


def features(category: Category) -> CategoryFeatures:
    """Return the feature set of ``category``."""
    return _FEATURES[Category(category)]


def all_category_names() -> List[str]:
    """Names of every known category, oldest first."""
    return [category.value for category in Category]


def is_category(value) -> bool:
    """True when ``value`` names a known category."""
    return isinstance(value, str) and value in all_category_names()


@lru_cache(maxsize=None)
def category_spec(category: Category) -> semantic_version.NpmSpec:
    """Build the npm range expression covering ``category``."""
    clauses = []
    for low, high in _INTERVALS[Category(category)]:
        clauses.append(f">={low} <{high}" if high else f">={low}")
    return semantic_version.NpmSpec(" || ".join(clauses))


def _sample_versions(range_str: str) -> List[semantic_version.Version]:
    """Versions at which an intersection with a category could start.

    Any non-empty intersection of the range with a category interval begins
    either at the interval's lower bound or at a lower bound of the range,
    which is one of its literals (or the next patch for ``>`` comparators).
    """
    samples = set()
    for intervals in _INTERVALS.values():
        for low, _high in intervals:
            samples.add(semantic_version.Version(low))
    for literal in _VERSION_LITERAL.findall(range_str):
        version = semantic_version.Version.coerce(literal)
        samples.add(version)
        samples.add(version.next_patch())
    return sorted(samples)


@lru_cache(maxsize=128)
def _categories_for_range(range_str: str) -> Tuple[Category, ...]:
    try:
        requested = semantic_version.NpmSpec(range_str)
    except ValueError as exc:
        raise InvalidOptionsError(f"Invalid node version range '{range_str}': {exc}") from exc
    samples = _sample_versions(range_str)
    found = []
    for category in Category:
        spec = category_spec(category)
        if any(requested.match(v) and spec.match(v) for v in samples):
            found.append(category)
    return tuple(found)


def get_categories_for_range(range_str: str) -> List[Category]:
    """Return every category whose node versions intersect ``range_str``.

    Categories come back oldest first; ``*`` yields all of them.
    """
    return list(_categories_for_range(range_str.strip() or "*"))
