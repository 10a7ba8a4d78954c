"""
SQLite access layer for files, categorization history, content analysis and department keywords.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from categorization import FileCategory, FileStatus
from learning import KeywordRecord

from .schema import create_database


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class FileRecord:
    """A discovered file and its current categorization."""

    file_id: str
    name: str
    parent_path: str
    mime_type: str
    size: int = 0
    extension: Optional[str] = None
    web_url: Optional[str] = None
    download_url: Optional[str] = None
    category: FileCategory = FileCategory.UNCATEGORIZED
    confidence: float = 0.0
    is_manually_set: bool = False
    status: FileStatus = FileStatus.DISCOVERED
    team_id: Optional[str] = None
    channel_id: Optional[str] = None
    modified_at: Optional[str] = None


@dataclass(frozen=True)
class FileUpsertResult:
    """Result of inserting or updating a file record."""

    file_id: str
    existed: bool
    manual: bool


@dataclass(frozen=True)
class HistoryEntry:
    """One category change for a file."""

    file_id: str
    old_category: Optional[FileCategory]
    new_category: FileCategory
    confidence: float
    is_manual: bool
    reason: Optional[str]
    created_at: str


@dataclass(frozen=True)
class DepartmentKeyword:
    """Stored keyword associated with a department."""

    keyword: str
    department: FileCategory
    weight: float
    source: Optional[str]
    is_active: bool


@dataclass(frozen=True)
class ContentAnalysis:
    """Stored outcome of the latest content analysis of a file."""

    file_id: str
    extracted_text: Optional[str]
    summary: Optional[str]
    keywords: list[str]
    entities: Optional[list[Any]]
    content_type: Optional[str]
    confidence: float
    ai_model: Optional[str]
    analyzed_at: str


@dataclass(frozen=True)
class FileCounts:
    """File totals grouped by category and status."""

    total: int
    by_category: dict[FileCategory, int]
    by_status: dict[FileStatus, int]
    categorized_by_category: dict[FileCategory, int]


_FILE_COLUMNS = (
    "file_id, name, parent_path, mime_type, size, extension, web_url, download_url, "
    "category, confidence, is_manually_set, status, team_id, channel_id, modified_at"
)


class DatabaseManager:
    """Manage the SQLite connection and common queries."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Create the database file and tables."""
        create_database(self.db_path)

    def connect(self) -> sqlite3.Connection:
        """Open the database connection if it is not already open."""
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL;")
        return self._conn

    def close(self) -> None:
        """Close the open connection, if any."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # Files

    def upsert_file(self, record: FileRecord) -> FileUpsertResult:
        """
        Insert or refresh a file record.

        A file whose category was set by a person keeps its category,
        confidence and status; only the remote metadata is refreshed.
        """
        conn = self.connect()
        now = _now()
        with self._lock:
            existing = conn.execute(
                "SELECT is_manually_set FROM files WHERE file_id = ?",
                (record.file_id,),
            ).fetchone()
            if existing:
                manual = bool(existing[0])
                conn.execute(
                    """
                    UPDATE files
                    SET name = ?,
                        parent_path = ?,
                        mime_type = ?,
                        size = ?,
                        extension = ?,
                        web_url = ?,
                        download_url = ?,
                        team_id = ?,
                        channel_id = ?,
                        modified_at = ?,
                        last_scanned_at = ?,
                        category = CASE WHEN is_manually_set THEN category ELSE ? END,
                        confidence = CASE WHEN is_manually_set THEN confidence ELSE ? END,
                        status = CASE WHEN is_manually_set THEN status ELSE ? END
                    WHERE file_id = ?
                    """,
                    (
                        record.name,
                        record.parent_path,
                        record.mime_type,
                        record.size,
                        record.extension,
                        record.web_url,
                        record.download_url,
                        record.team_id,
                        record.channel_id,
                        record.modified_at,
                        now,
                        record.category.value,
                        record.confidence,
                        record.status.value,
                        record.file_id,
                    ),
                )
                conn.commit()
                return FileUpsertResult(file_id=record.file_id, existed=True, manual=manual)

            conn.execute(
                f"""
                INSERT INTO files ({_FILE_COLUMNS}, last_scanned_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.file_id,
                    record.name,
                    record.parent_path,
                    record.mime_type,
                    record.size,
                    record.extension,
                    record.web_url,
                    record.download_url,
                    record.category.value,
                    record.confidence,
                    1 if record.is_manually_set else 0,
                    record.status.value,
                    record.team_id,
                    record.channel_id,
                    record.modified_at,
                    now,
                    now,
                ),
            )
            conn.commit()
        return FileUpsertResult(file_id=record.file_id, existed=False, manual=record.is_manually_set)

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        """Return a stored file by its remote id."""
        conn = self.connect()
        row = conn.execute(
            f"SELECT {_FILE_COLUMNS} FROM files WHERE file_id = ?",
            (file_id,),
        ).fetchone()
        if row is None:
            return None
        return FileRecord(
            file_id=str(row[0]),
            name=str(row[1]),
            parent_path=str(row[2] or ""),
            mime_type=str(row[3] or ""),
            size=int(row[4] or 0),
            extension=row[5],
            web_url=row[6],
            download_url=row[7],
            category=FileCategory.parse(row[8]) or FileCategory.UNCATEGORIZED,
            confidence=float(row[9] or 0.0),
            is_manually_set=bool(row[10]),
            status=FileStatus(row[11]) if row[11] else FileStatus.DISCOVERED,
            team_id=row[12],
            channel_id=row[13],
            modified_at=row[14],
        )

    def update_categorization(self, file_id: str, category: FileCategory, confidence: float) -> bool:
        """Apply an automatic categorization unless a person already set the category."""
        conn = self.connect()
        with self._lock:
            cursor = conn.execute(
                """
                UPDATE files
                SET category = ?, confidence = ?, status = ?
                WHERE file_id = ? AND is_manually_set = 0
                """,
                (category.value, confidence, FileStatus.CATEGORIZED.value, file_id),
            )
            conn.commit()
        return cursor.rowcount > 0

    def set_manual_category(self, file_id: str, category: FileCategory) -> None:
        """Pin a category chosen by a person."""
        conn = self.connect()
        with self._lock:
            conn.execute(
                """
                UPDATE files
                SET category = ?, confidence = 1.0, is_manually_set = 1, status = ?
                WHERE file_id = ?
                """,
                (category.value, FileStatus.CATEGORIZED.value, file_id),
            )
            conn.commit()

    def set_status(self, file_id: str, status: FileStatus) -> None:
        conn = self.connect()
        with self._lock:
            conn.execute("UPDATE files SET status = ? WHERE file_id = ?", (status.value, file_id))
            conn.commit()

    # History

    def record_history(
        self,
        file_id: str,
        old_category: Optional[FileCategory],
        new_category: FileCategory,
        confidence: float,
        is_manual: bool,
        reason: Optional[str],
    ) -> None:
        conn = self.connect()
        with self._lock:
            conn.execute(
                """
                INSERT INTO categorization_history (
                    file_id, old_category, new_category, confidence, is_manual, reason, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    file_id,
                    old_category.value if old_category else None,
                    new_category.value,
                    confidence,
                    1 if is_manual else 0,
                    reason,
                    _now(),
                ),
            )
            conn.commit()

    def list_history(self, file_id: str) -> list[HistoryEntry]:
        conn = self.connect()
        cursor = conn.execute(
            """
            SELECT file_id, old_category, new_category, confidence, is_manual, reason, created_at
            FROM categorization_history
            WHERE file_id = ?
            ORDER BY id
            """,
            (file_id,),
        )
        return [
            HistoryEntry(
                file_id=str(row[0]),
                old_category=FileCategory.parse(row[1]),
                new_category=FileCategory.parse(row[2]) or FileCategory.UNCATEGORIZED,
                confidence=float(row[3] or 0.0),
                is_manual=bool(row[4]),
                reason=row[5],
                created_at=str(row[6]),
            )
            for row in cursor.fetchall()
        ]

    # Department keywords

    def deactivate_keywords(self, department: FileCategory) -> int:
        """Mark every keyword of a department inactive."""
        conn = self.connect()
        with self._lock:
            cursor = conn.execute(
                "UPDATE department_keywords SET is_active = 0, updated_at = ? WHERE department = ?",
                (_now(), department.value),
            )
            conn.commit()
        return cursor.rowcount

    def upsert_keywords(self, records: Iterable[KeywordRecord]) -> int:
        """Create or reactivate keywords; returns the number of rows written."""
        conn = self.connect()
        now = _now()
        rows = [
            (record.keyword, record.department.value, record.weight, record.source, now, now)
            for record in records
        ]
        if not rows:
            return 0
        with self._lock:
            conn.executemany(
                """
                INSERT INTO department_keywords (
                    keyword, department, weight, source, is_active, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, 1, ?, ?)
                ON CONFLICT (keyword, department) DO UPDATE SET
                    weight = excluded.weight,
                    source = excluded.source,
                    is_active = 1,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            conn.commit()
        return len(rows)

    def list_keywords(
        self,
        department: FileCategory,
        active_only: bool = True,
        limit: Optional[int] = None,
    ) -> list[DepartmentKeyword]:
        """Keywords for a department ordered by weight, heaviest first."""
        conn = self.connect()
        query = "SELECT keyword, department, weight, source, is_active FROM department_keywords WHERE department = ?"
        params: list = [department.value]
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY weight DESC, id"
        if limit:
            query += " LIMIT ?"
            params.append(int(limit))
        cursor = conn.execute(query, params)
        return [
            DepartmentKeyword(
                keyword=str(row[0]),
                department=FileCategory.parse(row[1]) or department,
                weight=float(row[2] or 0.0),
                source=row[3],
                is_active=bool(row[4]),
            )
            for row in cursor.fetchall()
        ]

    # Content analysis

    def upsert_content_analysis(
        self,
        file_id: str,
        extracted_text: Optional[str],
        summary: Optional[str],
        keywords: Iterable[str],
        entities: Optional[list[Any]],
        content_type: Optional[str],
        confidence: float,
        ai_model: Optional[str],
    ) -> None:
        """Store the latest analysis of a file, replacing any earlier one."""
        conn = self.connect()
        with self._lock:
            conn.execute(
                """
                INSERT INTO content_analysis (
                    file_id, extracted_text, summary, keywords, entities,
                    content_type, confidence, ai_model, analyzed_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (file_id) DO UPDATE SET
                    extracted_text = excluded.extracted_text,
                    summary = excluded.summary,
                    keywords = excluded.keywords,
                    entities = excluded.entities,
                    content_type = excluded.content_type,
                    confidence = excluded.confidence,
                    ai_model = excluded.ai_model,
                    analyzed_at = excluded.analyzed_at
                """,
                (
                    file_id,
                    extracted_text,
                    summary,
                    json.dumps(list(keywords)),
                    json.dumps(entities) if entities is not None else None,
                    content_type,
                    confidence,
                    ai_model,
                    _now(),
                ),
            )
            conn.commit()

    def get_content_analysis(self, file_id: str) -> Optional[ContentAnalysis]:
        conn = self.connect()
        row = conn.execute(
            """
            SELECT file_id, extracted_text, summary, keywords, entities,
                   content_type, confidence, ai_model, analyzed_at
            FROM content_analysis
            WHERE file_id = ?
            """,
            (file_id,),
        ).fetchone()
        if row is None:
            return None
        return ContentAnalysis(
            file_id=str(row[0]),
            extracted_text=row[1],
            summary=row[2],
            keywords=json.loads(row[3]) if row[3] else [],
            entities=json.loads(row[4]) if row[4] else None,
            content_type=row[5],
            confidence=float(row[6] or 0.0),
            ai_model=row[7],
            analyzed_at=str(row[8]),
        )

    def count_content_analyses(self) -> int:
        conn = self.connect()
        return int(conn.execute("SELECT COUNT(*) FROM content_analysis").fetchone()[0])

    # Stats

    def file_counts(self) -> FileCounts:
        """Count files per category and status."""
        conn = self.connect()
        by_category = {category: 0 for category in FileCategory}
        categorized = {category: 0 for category in FileCategory}
        by_status = {status: 0 for status in FileStatus}
        rows = conn.execute("SELECT category, status, COUNT(*) FROM files GROUP BY category, status").fetchall()
        total = 0
        for raw_category, raw_status, count in rows:
            category = FileCategory.parse(raw_category) or FileCategory.UNCATEGORIZED
            status = FileStatus(raw_status) if raw_status else FileStatus.DISCOVERED
            by_category[category] += count
            by_status[status] += count
            if status is FileStatus.CATEGORIZED:
                categorized[category] += count
            total += count
        return FileCounts(
            total=total,
            by_category=by_category,
            by_status=by_status,
            categorized_by_category=categorized,
        )
