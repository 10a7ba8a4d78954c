"""
Categorization service for discovered team files.
"""

from .service import CategorizationService, ScanSummary

__all__ = ["CategorizationService", "ScanSummary"]
