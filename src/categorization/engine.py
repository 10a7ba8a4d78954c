"""
Rule-based categorizer.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import CategorizationResult, CategoryRule, FileCategory
from .rules import CATEGORIZATION_RULES, get_category_keywords
from .scorer import describe_match, file_extension, match_components, score_match

NO_MATCH_REASON = "No matching rules found"

_REASON_KEYWORDS = re.compile(r"contains: ([^;]+)")


class Categorizer:
    """Pick the best scoring department rule for a file."""

    def __init__(self, rules: Optional[Iterable[CategoryRule]] = None) -> None:
        self.rules: tuple[CategoryRule, ...] = tuple(rules) if rules is not None else CATEGORIZATION_RULES

    def categorize_file(self, file_name: str, file_path: str, mime_type: str = "") -> CategorizationResult:
        """Categorize a file from its name and path; the mime type is not scored."""
        name = (file_name or "").lower()
        path = (file_path or "").lower()
        extension = file_extension(file_name or "")

        best_rule: Optional[CategoryRule] = None
        best_match = None
        best_score = 0.0
        for rule in self.rules:
            match = match_components(rule, name, path, extension)
            score = score_match(rule, match)
            if score > best_score:
                best_rule, best_match, best_score = rule, match, score

        if best_rule is None:
            return CategorizationResult(FileCategory.UNCATEGORIZED, 0.0, NO_MATCH_REASON)
        return CategorizationResult(
            category=best_rule.category,
            confidence=min(best_score, 1.0),
            reason=describe_match(best_match),
        )

    def get_category_keywords(self, category: FileCategory) -> list[str]:
        return get_category_keywords(category, self.rules)


def keywords_from_reason(reason: str) -> list[str]:
    """Pull keyword hits back out of a rule reason string."""
    keywords: list[str] = []
    for group in _REASON_KEYWORDS.findall(reason or ""):
        keywords.extend(word for word in group.split(", ") if len(word) > 2)
    return keywords
