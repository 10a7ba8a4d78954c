"""
Merge rule-based and AI categorizations.
"""

from __future__ import annotations

from typing import Iterable

from categorization import AICategorizationResult, CategorizationResult, keywords_from_reason

AI_OVERRIDE_CONFIDENCE = 0.8
RULE_ANCHOR_CONFIDENCE = 0.7
RULE_BLEND_WEIGHT = 0.4
AI_BLEND_WEIGHT = 0.6


def merge_keywords(*groups: Iterable[str]) -> list[str]:
    """Concatenate keyword lists, keeping the first occurrence of each entry."""
    merged: dict[str, None] = {}
    for group in groups:
        for keyword in group:
            merged.setdefault(keyword, None)
    return list(merged)


def combine_results(
    rule_result: CategorizationResult, ai_result: AICategorizationResult
) -> AICategorizationResult:
    """
    Resolve a rule result and an AI result into one categorization.

    Branches are checked in order:
        1. confident AI disagreeing with the rules wins outright
        2. a confident rule result anchors the category
        3. otherwise confidences are blended 40/60 (rule/AI)
    """
    if ai_result.confidence > AI_OVERRIDE_CONFIDENCE and ai_result.category != rule_result.category:
        return AICategorizationResult(
            category=ai_result.category,
            confidence=ai_result.confidence,
            reason=f"AI: {ai_result.reason} (Rule-based suggested: {rule_result.category.value})",
            keywords=list(ai_result.keywords),
            summary=ai_result.summary,
            entities=ai_result.entities,
        )

    keywords = merge_keywords(keywords_from_reason(rule_result.reason), ai_result.keywords)

    if rule_result.confidence > RULE_ANCHOR_CONFIDENCE:
        reason = f"Rule-based: {rule_result.reason}"
        if ai_result.summary:
            reason += f" | AI Summary: {ai_result.summary}"
        return AICategorizationResult(
            category=rule_result.category,
            confidence=max(rule_result.confidence, ai_result.confidence),
            reason=reason,
            keywords=keywords,
            summary=ai_result.summary,
            entities=ai_result.entities,
        )

    blended = rule_result.confidence * RULE_BLEND_WEIGHT + ai_result.confidence * AI_BLEND_WEIGHT
    category = ai_result.category if ai_result.confidence > rule_result.confidence else rule_result.category
    return AICategorizationResult(
        category=category,
        confidence=blended,
        reason=f"Combined: {ai_result.reason} | {rule_result.reason}",
        keywords=keywords,
        summary=ai_result.summary,
        entities=ai_result.entities,
    )
