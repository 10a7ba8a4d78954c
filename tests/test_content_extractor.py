import asyncio
import io

import fitz
import httpx
import openpyxl
from docx import Document

from content import ContentExtractor


def serve(body: bytes, status: int = 200) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status, content=body))


def extract(extractor: ContentExtractor, mime_type: str, file_name: str):
    return asyncio.run(extractor.extract_content("https://files.test/download", mime_type, file_name))


def test_plain_text_is_decoded_and_truncated() -> None:
    extractor = ContentExtractor(text_max_chars=10, transport=serve(b"meeting minutes for staff"))

    assert extract(extractor, "text/plain", "minutes.txt") == "meeting mi"


def test_docx_paragraphs_are_extracted() -> None:
    document = Document()
    document.add_paragraph("Employee handbook")
    document.add_paragraph("Vacation policy")
    buffer = io.BytesIO()
    document.save(buffer)

    extractor = ContentExtractor(transport=serve(buffer.getvalue()))
    text = extract(extractor, "application/vnd.openxmlformats-officedocument.wordprocessingml.document", "hb.docx")

    assert "Employee handbook" in text
    assert "Vacation policy" in text


def test_sheet_cells_are_extracted() -> None:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["Item", "Cost"])
    sheet.append(["Drywall", 1200])
    buffer = io.BytesIO()
    workbook.save(buffer)

    extractor = ContentExtractor(transport=serve(buffer.getvalue()))
    text = extract(extractor, "", "takeoff.xlsx")

    assert text == "Item Cost Drywall 1200"


def test_pdf_text_is_extracted() -> None:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Cash flow statement")
    data = doc.tobytes()
    doc.close()

    extractor = ContentExtractor(transport=serve(data))

    assert "Cash flow statement" in extract(extractor, "application/pdf", "cash.pdf")


def test_presentations_get_placeholder_text() -> None:
    extractor = ContentExtractor(transport=serve(b"binary"))

    assert extract(extractor, "", "kickoff.pptx").startswith("PowerPoint presentation: kickoff.pptx")


def test_legacy_spreadsheets_get_placeholder_text() -> None:
    extractor = ContentExtractor(transport=serve(b"\xd0\xcf\x11\xe0binary"))

    assert extract(extractor, "", "ledger.xls").startswith("Excel spreadsheet: ledger.xls")
    assert extract(extractor, "application/vnd.ms-excel", "export").startswith("Excel spreadsheet: export")


def test_failures_return_none() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert extract(ContentExtractor(transport=serve(b"", status=404)), "text/plain", "a.txt") is None
    assert extract(ContentExtractor(transport=httpx.MockTransport(refuse)), "text/plain", "a.txt") is None
    assert extract(ContentExtractor(transport=serve(b"not a pdf")), "application/pdf", "broken.pdf") is None
    assert extract(ContentExtractor(transport=serve(b"data")), "application/zip", "bundle.zip") is None
    assert asyncio.run(ContentExtractor().extract_content("", "text/plain", "a.txt")) is None
