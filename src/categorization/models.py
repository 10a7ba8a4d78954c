"""
Shared types for the categorization engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FileCategory(str, Enum):
    """Department buckets a file can be assigned to."""

    OPERATIONS = "OPERATIONS"
    ESTIMATING = "ESTIMATING"
    ACCOUNTING = "ACCOUNTING"
    FINANCE = "FINANCE"
    OFFICE = "OFFICE"
    COMPANY_LAYOUT = "COMPANY_LAYOUT"
    UNCATEGORIZED = "UNCATEGORIZED"

    @classmethod
    def parse(cls, value: Any) -> Optional["FileCategory"]:
        """Return the matching category or None for unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class FileStatus(str, Enum):
    """Lifecycle of a discovered file."""

    DISCOVERED = "DISCOVERED"
    CATEGORIZED = "CATEGORIZED"
    ORGANIZED = "ORGANIZED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class CategoryRule:
    """Keyword, extension and path hints for one department."""

    category: FileCategory
    keywords: tuple[str, ...]
    extensions: tuple[str, ...]
    path_patterns: tuple[str, ...]
    priority: int

    def __post_init__(self) -> None:
        if not 1 <= self.priority <= 10:
            raise ValueError(f"Rule priority must be within 1-10, got {self.priority}")
        if self.category is FileCategory.UNCATEGORIZED:
            raise ValueError("UNCATEGORIZED cannot carry a rule")
        for ext in self.extensions:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext}")


@dataclass(frozen=True)
class CategorizationResult:
    """Outcome of the rule-based categorizer."""

    category: FileCategory
    confidence: float
    reason: str


@dataclass(frozen=True)
class AICategorizationResult:
    """Categorization enriched with keywords and an optional summary."""

    category: FileCategory
    confidence: float
    reason: str
    keywords: list[str] = field(default_factory=list)
    summary: Optional[str] = None
    entities: Optional[list[Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "reason": self.reason,
            "keywords": list(self.keywords),
            "summary": self.summary,
            "entities": self.entities,
        }


def clamp_confidence(value: float) -> float:
    """Clamp a confidence value into [0, 1]; NaN maps to 0."""
    value = float(value)
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)
