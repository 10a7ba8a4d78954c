"""
Deterministic department categorization.
"""

from .engine import NO_MATCH_REASON, Categorizer, keywords_from_reason
from .models import (
    AICategorizationResult,
    CategorizationResult,
    CategoryRule,
    FileCategory,
    FileStatus,
    clamp_confidence,
)
from .rules import CATEGORIZATION_RULES, get_category_keywords, rule_for
from .scorer import file_extension, score_rule

__all__ = [
    "AICategorizationResult",
    "CATEGORIZATION_RULES",
    "CategorizationResult",
    "Categorizer",
    "CategoryRule",
    "FileCategory",
    "FileStatus",
    "NO_MATCH_REASON",
    "clamp_confidence",
    "file_extension",
    "get_category_keywords",
    "keywords_from_reason",
    "rule_for",
    "score_rule",
]
