"""
AI-assisted categorization with rule-based fallback.
"""

from __future__ import annotations

import asyncio
import math
import logging
from numbers import Real
from typing import Any, Optional

from categorization import (
    AICategorizationResult,
    CategorizationResult,
    Categorizer,
    FileCategory,
    clamp_confidence,
    keywords_from_reason,
)
from config import AppConfig

from .client import CompletionClient, CompletionError
from .combiner import combine_results

MIN_CONTENT_CHARS = 50
PROMPT_CONTENT_CHARS = 2000
DEFAULT_AI_CONFIDENCE = 0.5
AI_FAILURE_SUFFIX = " (AI analysis failed, used rule-based)"

DEPARTMENT_DEFINITIONS = (
    ("OPERATIONS", "Project management, workflows, construction, field operations, procedures"),
    ("ESTIMATING", "Cost estimates, bids, quotes, proposals, pricing, takeoffs"),
    ("ACCOUNTING", "Invoices, receipts, expenses, billing, bookkeeping, transactions"),
    ("FINANCE", "Budgets, financial statements, cash flow, forecasts, investments"),
    ("OFFICE", "Policies, HR, employee documents, administrative materials"),
    ("COMPANY_LAYOUT", "Blueprints, drawings, architectural plans, layouts, designs"),
    ("UNCATEGORIZED", "If it doesn't fit any department"),
)


def build_prompt(file_name: str, file_path: str, content: str) -> str:
    """Render the classification prompt sent to the completion endpoint."""
    departments = "\n".join(f"- {name}: {definition}" for name, definition in DEPARTMENT_DEFINITIONS)
    return (
        "Analyze this document and categorize it into one of these departments:\n\n"
        f"DEPARTMENTS:\n{departments}\n\n"
        "DOCUMENT INFO:\n"
        f"Filename: {file_name}\n"
        f"Path: {file_path}\n"
        f"Content: {content[:PROMPT_CONTENT_CHARS]}...\n\n"
        "Respond with JSON only:\n"
        "{\n"
        '  "category": "DEPARTMENT_NAME",\n'
        '  "confidence": 0.85,\n'
        '  "reason": "Brief explanation why this category was chosen",\n'
        '  "keywords": ["key", "words", "found"],\n'
        '  "summary": "Brief 1-2 sentence summary of document content",\n'
        '  "entities": ["important", "entities", "found"]\n'
        "}"
    )


def parse_ai_response(data: dict[str, Any]) -> AICategorizationResult:
    """Validate an untrusted completion payload."""
    category = FileCategory.parse(data.get("category"))
    if category is None:
        raise CompletionError(f"Unknown category in AI response: {data.get('category')!r}")

    raw_confidence = data.get("confidence")
    if (
        isinstance(raw_confidence, Real)
        and not isinstance(raw_confidence, bool)
        and math.isfinite(raw_confidence)
    ):
        confidence = clamp_confidence(raw_confidence)
    else:
        confidence = DEFAULT_AI_CONFIDENCE

    keywords = data.get("keywords")
    keywords = [str(item) for item in keywords] if isinstance(keywords, list) else []
    summary = data.get("summary")
    entities = data.get("entities")
    return AICategorizationResult(
        category=category,
        confidence=confidence,
        reason=str(data.get("reason") or "AI categorization"),
        keywords=keywords,
        summary=summary if isinstance(summary, str) and summary else None,
        entities=entities if isinstance(entities, list) else None,
    )


def as_ai_result(result: CategorizationResult, reason_suffix: str = "") -> AICategorizationResult:
    """Reshape a rule result into the AI result schema."""
    return AICategorizationResult(
        category=result.category,
        confidence=result.confidence,
        reason=result.reason + reason_suffix,
        keywords=keywords_from_reason(result.reason),
    )


class AiClassifier:
    """Categorize files with a completion endpoint on top of the rule engine."""

    def __init__(
        self,
        categorizer: Categorizer,
        client: Optional[CompletionClient] = None,
        timeout_seconds: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.categorizer = categorizer
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger("teams_organizer")

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        categorizer: Categorizer,
        client: Optional[CompletionClient],
        logger: Optional[logging.Logger] = None,
    ) -> "AiClassifier":
        settings = config.ai
        return cls(
            categorizer,
            client=client if settings.enabled else None,
            timeout_seconds=settings.timeout_seconds,
            logger=logger,
        )

    async def classify_with_content(
        self,
        file_name: str,
        file_path: str,
        mime_type: str,
        content: Optional[str] = None,
    ) -> AICategorizationResult:
        """Return a combined categorization; AI failures degrade to the rule result."""
        rule_result = self.categorizer.categorize_file(file_name, file_path, mime_type)
        if self.client is None or not content or len(content.strip()) < MIN_CONTENT_CHARS:
            return as_ai_result(rule_result)

        try:
            ai_result = await self._analyze(file_name, file_path, content)
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            self.logger.warning("AI categorization cancelled for %s; using rules", file_name)
            return as_ai_result(rule_result, AI_FAILURE_SUFFIX)
        except (CompletionError, asyncio.TimeoutError) as exc:
            self.logger.warning("AI categorization failed for %s: %s", file_name, exc)
            return as_ai_result(rule_result, AI_FAILURE_SUFFIX)
        except Exception as exc:
            self.logger.exception("Unexpected AI categorization error for %s: %s", file_name, exc)
            return as_ai_result(rule_result, AI_FAILURE_SUFFIX)

        return combine_results(rule_result, ai_result)

    async def _analyze(self, file_name: str, file_path: str, content: str) -> AICategorizationResult:
        prompt = build_prompt(file_name, file_path, content)
        if self.timeout_seconds:
            data = await asyncio.wait_for(self.client.complete(prompt), timeout=self.timeout_seconds)
        else:
            data = await self.client.complete(prompt)
        return parse_ai_response(data)
