"""
File content extraction.
"""

from .extractor import ContentExtractor

__all__ = ["ContentExtractor"]
