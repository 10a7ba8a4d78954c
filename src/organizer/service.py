"""
Categorization service wiring the engine to persistence and remote collaborators.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from ai import AiClassifier, HttpCompletionClient
from categorization import (
    AICategorizationResult,
    CategorizationResult,
    Categorizer,
    FileCategory,
    FileStatus,
    file_extension,
)
from config import AppConfig
from content import ContentExtractor
from database import ContentAnalysis, DatabaseManager, FileCounts, FileRecord
from learning import CorrectionLearner, KeywordRecord

MANUAL_REASON = "Manual categorization by user"
DEFAULT_MIME_TYPE = "application/octet-stream"
ANALYSIS_TEXT_CHARS = 5000
DEPARTMENT_KEYWORD_LIMIT = 20
OVERVIEW_KEYWORD_LIMIT = 5

KeywordInput = Union[str, dict]


@dataclass
class ScanSummary:
    """Summary stats for one channel scan."""

    files_found: int = 0
    files_processed: int = 0
    errors: list[str] = field(default_factory=list)


class CategorizationService:
    """Entry point used by scans, analysis jobs and manual corrections."""

    def __init__(
        self,
        categorizer: Categorizer,
        classifier: AiClassifier,
        learner: CorrectionLearner,
        db_manager: DatabaseManager,
        extractor: Optional[ContentExtractor] = None,
        apply_threshold: float = 0.6,
        max_concurrency: int = 4,
        ai_model: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.categorizer = categorizer
        self.classifier = classifier
        self.learner = learner
        self.db_manager = db_manager
        self.extractor = extractor
        self.apply_threshold = apply_threshold
        self.max_concurrency = max(1, max_concurrency)
        self.ai_model = ai_model
        self.logger = logger or logging.getLogger("teams_organizer")

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        db_manager: DatabaseManager,
        loggers: Optional[dict[str, logging.Logger]] = None,
    ) -> "CategorizationService":
        loggers = loggers or {}
        logger = loggers.get("main")
        categorizer = Categorizer()
        client = HttpCompletionClient.from_config(config, logger=logger)
        return cls(
            categorizer=categorizer,
            classifier=AiClassifier.from_config(config, categorizer, client, logger=logger),
            learner=CorrectionLearner(db_manager, logger=loggers.get("learning")),
            db_manager=db_manager,
            extractor=ContentExtractor.from_config(config, logger=logger),
            apply_threshold=config.ai.apply_threshold,
            max_concurrency=config.ai.max_concurrency,
            ai_model=config.ai.model,
            logger=logger,
        )

    # Engine operations

    def categorize_file(self, name: str, path: str, mime_type: str = "") -> CategorizationResult:
        return self.categorizer.categorize_file(name, path, mime_type)

    async def categorize_file_with_ai(
        self, name: str, path: str, mime_type: str = "", content: Optional[str] = None
    ) -> AICategorizationResult:
        return await self.classifier.classify_with_content(name, path, mime_type, content)

    async def learn_from_correction(
        self,
        name: str,
        path: str,
        mime_type: str,
        old_category: Optional[FileCategory],
        new_category: FileCategory,
        content: Optional[str] = None,
    ) -> None:
        await self.learner.learn_from_correction(name, path, mime_type, old_category, new_category, content)

    def get_category_keywords(self, category: FileCategory) -> list[str]:
        return self.categorizer.get_category_keywords(category)

    # Scanning

    def scan_files(self, team_id: str, channel_id: str, items: Iterable[dict[str, Any]]) -> ScanSummary:
        """Categorize discovered channel files with the rules and store them."""
        summary = ScanSummary()
        for item in items:
            summary.files_found += 1
            name = str(item.get("name") or "")
            try:
                self._store_scanned_item(team_id, channel_id, item)
                summary.files_processed += 1
            except Exception as exc:
                self.logger.warning("Error processing file %s: %s", name, exc)
                summary.errors.append(f"Error processing file {name}: {exc}")
        self.logger.info(
            "Scan of channel %s completed: %s/%s files processed",
            channel_id,
            summary.files_processed,
            summary.files_found,
        )
        return summary

    def _store_scanned_item(self, team_id: str, channel_id: str, item: dict[str, Any]) -> None:
        name = str(item["name"])
        parent_path = str((item.get("parentReference") or {}).get("path") or "")
        mime_type = str((item.get("file") or {}).get("mimeType") or DEFAULT_MIME_TYPE)
        result = self.categorizer.categorize_file(name, parent_path, mime_type)
        record = FileRecord(
            file_id=str(item["id"]),
            name=name,
            parent_path=parent_path,
            mime_type=mime_type,
            size=int(item.get("size") or 0),
            extension=file_extension(name) or None,
            web_url=item.get("webUrl"),
            download_url=item.get("downloadUrl") or item.get("@microsoft.graph.downloadUrl"),
            category=result.category,
            confidence=result.confidence,
            status=FileStatus.CATEGORIZED,
            team_id=team_id,
            channel_id=channel_id,
            modified_at=item.get("lastModifiedDateTime"),
        )
        upsert = self.db_manager.upsert_file(record)
        if not upsert.manual:
            self.db_manager.record_history(
                record.file_id, None, result.category, result.confidence, False, result.reason
            )

    # AI analysis

    async def analyze_file(self, file_id: str) -> AICategorizationResult:
        """Extract content, classify with AI and apply confident results."""
        record = self._require_file(file_id)
        content = None
        if record.download_url and self.extractor is not None:
            content = await self.extractor.extract_content(record.download_url, record.mime_type, record.name)

        result = await self.classifier.classify_with_content(
            record.name, record.parent_path, record.mime_type, content
        )
        self.db_manager.upsert_content_analysis(
            file_id,
            extracted_text=content[:ANALYSIS_TEXT_CHARS] if content else None,
            summary=result.summary,
            keywords=result.keywords,
            entities=result.entities,
            content_type=record.mime_type,
            confidence=result.confidence,
            ai_model=self.ai_model if self.classifier.client is not None else None,
        )
        if result.confidence > self.apply_threshold and not record.is_manually_set:
            if self.db_manager.update_categorization(file_id, result.category, result.confidence):
                self.db_manager.record_history(
                    file_id, record.category, result.category, result.confidence, False, result.reason
                )
        self.logger.info(
            "AI analysis completed for %s: %s (%.2f)", record.name, result.category.value, result.confidence
        )
        return result

    async def analyze_files(self, file_ids: Iterable[str]) -> dict[str, Optional[AICategorizationResult]]:
        """Analyze many files with at most max_concurrency in flight."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _run(file_id: str) -> tuple[str, Optional[AICategorizationResult]]:
            async with semaphore:
                try:
                    return file_id, await self.analyze_file(file_id)
                except Exception as exc:
                    self.logger.error("Analysis failed for %s: %s", file_id, exc)
                    self.db_manager.set_status(file_id, FileStatus.ERROR)
                    return file_id, None

        results = await asyncio.gather(*(_run(file_id) for file_id in file_ids))
        return dict(results)

    # Manual corrections

    async def recategorize_file(
        self, file_id: str, category: Union[str, FileCategory], content: Optional[str] = None
    ) -> FileRecord:
        """Pin a user chosen category and feed the correction to the learner."""
        new_category = FileCategory.parse(category)
        if new_category is None:
            raise ValueError(f"Invalid category: {category!r}")
        record = self._require_file(file_id)
        self.db_manager.set_manual_category(file_id, new_category)
        self.db_manager.record_history(file_id, record.category, new_category, 1.0, True, MANUAL_REASON)
        await self.learner.learn_from_correction(
            record.name, record.parent_path, record.mime_type, record.category, new_category, content
        )
        self.logger.info(
            "File %s recategorized from %s to %s", record.name, record.category.value, new_category.value
        )
        return self._require_file(file_id)

    # Department keywords

    def update_department_keywords(self, department: FileCategory, keywords: Iterable[KeywordInput]) -> int:
        """Replace a department's active keyword set."""
        records = []
        for entry in keywords:
            if isinstance(entry, dict):
                records.append(
                    KeywordRecord(
                        keyword=str(entry["keyword"]),
                        department=department,
                        weight=float(entry.get("weight") or 1.0),
                        source=str(entry.get("source") or "manual"),
                    )
                )
            else:
                records.append(KeywordRecord(keyword=str(entry), department=department, source="manual"))
        self.db_manager.deactivate_keywords(department)
        written = self.db_manager.upsert_keywords(records)
        self.logger.info("Keywords updated for %s: %s", department.value, written)
        return written

    def department_top_keywords(self, department: FileCategory, limit: int = 20) -> list[str]:
        return [item.keyword for item in self.db_manager.list_keywords(department, limit=limit)]

    def get_content_analysis(self, file_id: str) -> Optional[ContentAnalysis]:
        self._require_file(file_id)
        return self.db_manager.get_content_analysis(file_id)

    # Analytics

    def department_stats(self, department: Union[str, FileCategory, None] = None) -> dict[str, Any]:
        """
        File counts and learned keywords per department.

        With a department, return that department alone with its top 20
        keywords. Without one, return overall totals plus a summary of every
        department with its top 5 keywords.
        """
        counts = self.db_manager.file_counts()
        if department is not None:
            category = FileCategory.parse(department)
            if category is None or category is FileCategory.UNCATEGORIZED:
                raise ValueError(f"Invalid department: {department!r}")
            return self._department_summary(category, counts, DEPARTMENT_KEYWORD_LIMIT)

        return {
            "total_files": counts.total,
            "categorized_files": counts.total - counts.by_category[FileCategory.UNCATEGORIZED],
            "organized_files": counts.by_status[FileStatus.ORGANIZED],
            "ai_analyzed_files": self.db_manager.count_content_analyses(),
            "files_by_category": {category.value: count for category, count in counts.by_category.items()},
            "files_by_status": {status.value: count for status, count in counts.by_status.items()},
            "departments": [
                self._department_summary(category, counts, OVERVIEW_KEYWORD_LIMIT)
                for category in FileCategory
                if category is not FileCategory.UNCATEGORIZED
            ],
        }

    def _department_summary(
        self, category: FileCategory, counts: FileCounts, keyword_limit: int
    ) -> dict[str, Any]:
        return {
            "department": category.value,
            "total_files": counts.by_category[category],
            "categorized_files": counts.categorized_by_category[category],
            "top_keywords": self.department_top_keywords(category, limit=keyword_limit),
        }

    def _require_file(self, file_id: str) -> FileRecord:
        record = self.db_manager.get_file(file_id)
        if record is None:
            raise KeyError(f"File not found: {file_id}")
        return record
