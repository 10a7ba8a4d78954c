"""
Weighted rule scoring for file names, paths and extensions.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import CategoryRule

FILENAME_KEYWORD_WEIGHT = 40.0
PATH_KEYWORD_WEIGHT = 30.0
PATH_PATTERN_WEIGHT = 20.0
EXTENSION_WEIGHT = 10.0
MAX_RAW_SCORE = 100.0


@dataclass(frozen=True)
class RuleMatch:
    """Components of a rule that matched a file."""

    name_keywords: tuple[str, ...]
    path_keywords: tuple[str, ...]
    path_patterns: tuple[str, ...]
    extension: str

    @property
    def empty(self) -> bool:
        return not (self.name_keywords or self.path_keywords or self.path_patterns or self.extension)


def file_extension(file_name: str) -> str:
    """Return the extension including the dot, or an empty string."""
    index = file_name.rfind(".")
    return file_name[index:] if index > 0 else ""


def match_components(rule: CategoryRule, name: str, path: str, extension: str) -> RuleMatch:
    """Collect the keywords, patterns and extension of a rule found in a file."""
    return RuleMatch(
        name_keywords=tuple(keyword for keyword in rule.keywords if keyword in name),
        path_keywords=tuple(keyword for keyword in rule.keywords if keyword in path),
        path_patterns=tuple(pattern for pattern in rule.path_patterns if pattern in path),
        extension=extension if extension and extension.lower() in rule.extensions else "",
    )


def _fraction(matched: int, total: int) -> float:
    return matched / total if total else 0.0


def score_match(rule: CategoryRule, match: RuleMatch) -> float:
    """Turn matched components into a priority-scaled score in [0, 1]."""
    raw = _fraction(len(match.name_keywords), len(rule.keywords)) * FILENAME_KEYWORD_WEIGHT
    raw += _fraction(len(match.path_keywords), len(rule.keywords)) * PATH_KEYWORD_WEIGHT
    raw += _fraction(len(match.path_patterns), len(rule.path_patterns)) * PATH_PATTERN_WEIGHT
    if match.extension:
        raw += EXTENSION_WEIGHT
    return (raw / MAX_RAW_SCORE) * (rule.priority / 10)


def score_rule(rule: CategoryRule, name: str, path: str, extension: str) -> float:
    """
    Score a lowercase name and path, plus an extension of any case, against a rule.

    Each keyword and pattern term is the fraction of the rule's candidates
    found as substrings, so long keyword lists are not favoured.
    """
    return score_match(rule, match_components(rule, name, path, extension))


def describe_match(match: RuleMatch) -> str:
    """Render matched components as a human readable reason."""
    reasons: list[str] = []
    if match.name_keywords:
        reasons.append(f"filename contains: {', '.join(match.name_keywords)}")
    if match.path_keywords:
        reasons.append(f"path contains: {', '.join(match.path_keywords)}")
    if match.path_patterns:
        reasons.append(f"path pattern: {', '.join(match.path_patterns)}")
    if match.extension:
        reasons.append(f"file type: {match.extension}")
    return "; ".join(reasons) if reasons else "Rule matched"
