"""
Learning signal captured from manual categorizations.
"""

from .corrections import (
    CorrectionLearner,
    KeywordRecord,
    KeywordStore,
    extract_content_keywords,
    extract_smart_keywords,
)

__all__ = [
    "CorrectionLearner",
    "KeywordRecord",
    "KeywordStore",
    "extract_content_keywords",
    "extract_smart_keywords",
]
