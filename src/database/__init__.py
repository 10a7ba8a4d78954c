"""
Database package for schema creation and persistence helpers.
"""

from .manager import (
    ContentAnalysis,
    DatabaseManager,
    DepartmentKeyword,
    FileCounts,
    FileRecord,
    FileUpsertResult,
    HistoryEntry,
)
from .schema import create_database

__all__ = [
    "ContentAnalysis",
    "DatabaseManager",
    "DepartmentKeyword",
    "FileCounts",
    "FileRecord",
    "FileUpsertResult",
    "HistoryEntry",
    "create_database",
]
