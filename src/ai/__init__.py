"""
AI categorization adapter and result combination.
"""

from .classifier import AiClassifier, build_prompt, parse_ai_response
from .client import CompletionClient, CompletionError, HttpCompletionClient
from .combiner import combine_results

__all__ = [
    "AiClassifier",
    "CompletionClient",
    "CompletionError",
    "HttpCompletionClient",
    "build_prompt",
    "combine_results",
    "parse_ai_response",
]
