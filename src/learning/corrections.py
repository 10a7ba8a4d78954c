"""
Keyword capture from user category corrections.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from categorization import FileCategory

MAX_KEYWORDS = 20
MAX_CONTENT_KEYWORDS = 10
MIN_TOKEN_LENGTH = 3
MIN_CONTENT_WORD_LENGTH = 4
CORRECTION_SOURCE = "correction"

BUSINESS_TERMS = (
    "invoice", "receipt", "payment", "budget", "cost", "estimate",
    "project", "schedule", "timeline", "proposal", "contract",
    "drawing", "blueprint", "design", "layout", "plan",
    "policy", "procedure", "manual", "handbook", "memo",
)

COMMON_WORDS = frozenset(
    {
        "this", "that", "with", "have", "will", "from", "they", "know",
        "want", "been", "good", "much", "some", "time", "very", "when",
        "come", "here", "just", "like", "long", "make", "many", "over",
        "such", "take", "than", "them", "well", "were", "what",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_CONTENT_WORD = re.compile(r"\b[a-z]{3,}\b")


@dataclass(frozen=True)
class KeywordRecord:
    """A department keyword ready to hand to the store."""

    keyword: str
    department: FileCategory
    weight: float = 1.0
    source: str = CORRECTION_SOURCE


class KeywordStore(Protocol):
    def deactivate_keywords(self, department: FileCategory) -> int:
        ...

    def upsert_keywords(self, records: Iterable[KeywordRecord]) -> int:
        ...


def _tokens(value: str) -> list[str]:
    cleaned = _NON_ALNUM.sub(" ", (value or "").lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


def extract_content_keywords(content: str) -> list[str]:
    """Business terms present in the text, then its most frequent meaningful words."""
    lowered = content.lower()
    keywords = {term: None for term in BUSINESS_TERMS if term in lowered}
    frequency = Counter(
        word
        for word in _CONTENT_WORD.findall(lowered)
        if len(word) >= MIN_CONTENT_WORD_LENGTH and word not in COMMON_WORDS
    )
    for word, _ in frequency.most_common(MAX_CONTENT_KEYWORDS):
        keywords.setdefault(word, None)
    return list(keywords)


def extract_smart_keywords(file_name: str, file_path: str, content: Optional[str] = None) -> list[str]:
    """Candidate keywords from the file name, its path and optional content."""
    keywords: dict[str, None] = {}
    for token in _tokens(file_name):
        keywords.setdefault(token, None)
    for token in _tokens(file_path):
        keywords.setdefault(token, None)
    if content:
        for keyword in extract_content_keywords(content):
            keywords.setdefault(keyword, None)
    return list(keywords)[:MAX_KEYWORDS]


class CorrectionLearner:
    """Record keywords for the department a user moved a file into."""

    def __init__(self, store: KeywordStore, logger: Optional[logging.Logger] = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger("teams_organizer.learning")

    async def learn_from_correction(
        self,
        file_name: str,
        file_path: str,
        mime_type: str,
        old_category: Optional[FileCategory],
        new_category: FileCategory,
        content: Optional[str] = None,
    ) -> None:
        self.logger.info(
            "Learning from correction: %s (%s, %s) %s -> %s",
            file_name,
            file_path,
            mime_type,
            old_category.value if old_category else None,
            new_category.value,
        )
        if new_category is FileCategory.UNCATEGORIZED:
            return
        keywords = extract_smart_keywords(file_name, file_path, content)
        if not keywords:
            return
        records = [KeywordRecord(keyword=keyword, department=new_category) for keyword in keywords]
        try:
            stored = await asyncio.to_thread(self.store.upsert_keywords, records)
        except Exception as exc:
            self.logger.warning("Failed to store learned keywords for %s: %s", file_name, exc)
            return
        self.logger.info("Stored %s keywords for %s", stored, new_category.value)
