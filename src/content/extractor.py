"""
Download files and pull plain text out of them for AI analysis.
"""

from __future__ import annotations

import io
import logging
from typing import Optional

import fitz  # PyMuPDF
import httpx
import openpyxl
from docx import Document

from categorization import file_extension
from config import AppConfig

TEXT_EXTS = {".txt", ".csv", ".md", ".json", ".xml"}
WORD_EXTS = {".docx"}
SHEET_EXTS = {".xlsx", ".xlsm"}
LEGACY_SHEET_EXTS = {".xls"}
LEGACY_SHEET_MIME = "application/vnd.ms-excel"
SLIDE_EXTS = {".pptx", ".ppt"}


class ContentExtractor:
    """Fetch a file by URL and return its text, or None when nothing usable comes back."""

    def __init__(
        self,
        text_max_chars: int = 5000,
        pdf_max_pages: int = 2,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.text_max_chars = text_max_chars
        self.pdf_max_pages = pdf_max_pages
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.logger = logger or logging.getLogger("teams_organizer")

    @classmethod
    def from_config(cls, config: AppConfig, logger: Optional[logging.Logger] = None) -> "ContentExtractor":
        settings = config.content
        return cls(
            text_max_chars=settings.text_max_chars,
            pdf_max_pages=settings.pdf_max_pages,
            timeout_seconds=settings.download_timeout_seconds,
            logger=logger,
        )

    async def extract_content(self, download_url: str, mime_type: str, file_name: str) -> Optional[str]:
        if not download_url:
            return None
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport, follow_redirects=True
            ) as client:
                response = await client.get(download_url)
        except httpx.HTTPError as exc:
            self.logger.warning("Content download failed for %s: %s", file_name, exc)
            return None
        if response.status_code != 200:
            self.logger.warning("Content download for %s returned HTTP %s", file_name, response.status_code)
            return None
        try:
            text = self.extract_bytes(response.content, mime_type or "", file_name)
        except Exception as exc:
            self.logger.warning("Content extraction failed for %s: %s", file_name, exc)
            return None
        if text is None:
            return None
        return text[: self.text_max_chars]

    def extract_bytes(self, data: bytes, mime_type: str, file_name: str) -> Optional[str]:
        """Dispatch on mime type and extension."""
        suffix = file_extension(file_name.lower())
        if mime_type.startswith("text/") or suffix in TEXT_EXTS:
            return data.decode("utf-8", errors="ignore")
        if mime_type == "application/pdf" or suffix == ".pdf":
            return self._extract_pdf(data)
        if "wordprocessingml" in mime_type or suffix in WORD_EXTS:
            return self._extract_docx(data)
        if "spreadsheetml" in mime_type or suffix in SHEET_EXTS:
            return self._extract_sheet(data)
        # openpyxl cannot read the binary .xls format
        if mime_type == LEGACY_SHEET_MIME or suffix in LEGACY_SHEET_EXTS:
            return f"Excel spreadsheet: {file_name}. Contains data tables and calculations."
        if "presentationml" in mime_type or suffix in SLIDE_EXTS:
            return f"PowerPoint presentation: {file_name}. Contains slides and presentation content."
        return None

    def _extract_pdf(self, data: bytes) -> str:
        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = min(self.pdf_max_pages, doc.page_count)
            return "".join(doc[index].get_text() for index in range(pages))

    def _extract_docx(self, data: bytes) -> str:
        document = Document(io.BytesIO(data))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    def _extract_sheet(self, data: bytes) -> str:
        workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            sheet = workbook.active
            values = []
            for row in sheet.iter_rows(min_row=1, max_row=20, max_col=10, values_only=True):
                for value in row:
                    if value:
                        values.append(str(value))
            return " ".join(values)
        finally:
            workbook.close()
