"""
Database schema definitions for the teams file organizer.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path


def create_database(db_path: Path) -> None:
    """Create the SQLite database and all of its tables."""
    conn = _connect(db_path)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS files (
            id INTEGER PRIMARY KEY,
            file_id TEXT UNIQUE,
            name TEXT,
            size INTEGER,
            mime_type TEXT,
            extension TEXT,
            web_url TEXT,
            download_url TEXT,
            parent_path TEXT,
            category TEXT,
            confidence REAL,
            is_manually_set BOOLEAN DEFAULT 0,
            status TEXT,
            team_id TEXT,
            channel_id TEXT,
            modified_at TIMESTAMP,
            last_scanned_at TIMESTAMP,
            created_at TIMESTAMP
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_files_category ON files(category)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_files_status ON files(status)")
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS categorization_history (
            id INTEGER PRIMARY KEY,
            file_id TEXT,
            old_category TEXT,
            new_category TEXT,
            confidence REAL,
            is_manual BOOLEAN,
            reason TEXT,
            created_at TIMESTAMP
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_history_file_id ON categorization_history(file_id)")
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS department_keywords (
            id INTEGER PRIMARY KEY,
            keyword TEXT,
            department TEXT,
            weight REAL,
            source TEXT,
            is_active BOOLEAN,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            UNIQUE (keyword, department)
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_keywords_department ON department_keywords(department, is_active)"
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS content_analysis (
            id INTEGER PRIMARY KEY,
            file_id TEXT UNIQUE,
            extracted_text TEXT,
            summary TEXT,
            keywords TEXT,
            entities TEXT,
            content_type TEXT,
            confidence REAL,
            ai_model TEXT,
            analyzed_at TIMESTAMP
        )
        """
    )
    conn.commit()
    conn.close()


def _connect(db_path: Path) -> sqlite3.Connection:
    """Create a SQLite connection with WAL enabled."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn
