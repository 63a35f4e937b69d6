from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from zipfile import BadZipFile, ZipFile

import defusedxml.ElementTree as ET
from docx import Document
from pypdf import PdfReader

from app.core.errors import ParseError, UnsupportedFileTypeError
from app.parsing.models import ExtractedText

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
TEXT_CONTENT_TYPE = "text/plain"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
LEGACY_WORD_CONTENT_TYPE = "application/msword"

CONTENT_TYPE_SOURCES = {
    PDF_CONTENT_TYPE: "pdf",
    TEXT_CONTENT_TYPE: "txt",
    DOCX_CONTENT_TYPE: "docx",
    LEGACY_WORD_CONTENT_TYPE: "docx",
}

_TEXT_ENCODINGS = ("utf-8-sig", "latin-1")

EMPTY_HINTS = {
    "pdf": "The PDF may be scanned or image-based. Try a text-based PDF or paste the text.",
    "docx": "The document appears to be empty. Check that it contains text rather than images.",
    "txt": "The file appears to be empty.",
}


def normalize_content_type(value: str | None) -> str:
    return (value or "").split(";", 1)[0].strip().lower()


def _decode_text(content: bytes) -> str:
    if content.startswith((b"\xff\xfe", b"\xfe\xff")):
        try:
            return content.decode("utf-16")
        except UnicodeDecodeError:
            pass
    for encoding in _TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return ""


def _extract_pdf(content: bytes) -> tuple[str, str]:
    try:
        reader = PdfReader(BytesIO(content))
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except Exception as exc:  # noqa: BLE001 - pypdf raises a wide range of errors on malformed files
        raise ParseError(
            "Unable to read PDF file",
            hint="The PDF may be corrupted or password protected.",
        ) from exc
    return "\n".join(page for page in pages if page), "pypdf"


def _extract_docx_xml(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts = [node.text for node in paragraph.iter() if node.tag.endswith("}t") and node.text]
        line = "".join(texts).strip()
        if line:
            paragraphs.append(line)
    return "\n".join(paragraphs)


def _extract_docx(content: bytes, *, legacy: bool) -> tuple[str, str]:
    try:
        document = Document(BytesIO(content))
        paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text and cell.text.strip()]
                if cells:
                    paragraphs.append(" | ".join(cells))
        return "\n".join(paragraphs), "python-docx"
    except Exception as exc:  # noqa: BLE001 - retried with the raw XML reader below
        logger.info("docx_parser_fallback error=%s", exc)

    try:
        return _extract_docx_xml(content), "zipxml-fallback"
    except (BadZipFile, KeyError, ValueError, ET.ParseError) as exc:
        if legacy:
            raise ParseError(
                "Legacy .doc files are not supported",
                hint="Convert the document to .docx or PDF and upload it again.",
            ) from exc
        raise ParseError(
            "Unable to read Word document",
            hint="The document may be corrupted. Try saving it again as .docx.",
        ) from exc


def extract_text(path: str | Path, content_type: str) -> ExtractedText:
    """Extract plain text from a staged upload.

    Raises ``UnsupportedFileTypeError`` for content types outside the supported
    set and ``ParseError`` when nothing readable comes out of the file.
    """
    normalized = normalize_content_type(content_type)
    source_type = CONTENT_TYPE_SOURCES.get(normalized)
    if source_type is None:
        raise UnsupportedFileTypeError("Invalid file type. Only PDF, DOC, DOCX, and TXT files are allowed.")

    content = Path(path).read_bytes()
    warnings: list[str] = []
    if source_type == "pdf":
        text, parser = _extract_pdf(content)
    elif source_type == "docx":
        text, parser = _extract_docx(content, legacy=normalized == LEGACY_WORD_CONTENT_TYPE)
        if parser != "python-docx":
            warnings.append("Parsed with the raw XML reader; tables and headers may be missing.")
    else:
        text, parser = _decode_text(content), "text"

    text = text.replace("\x00", "").strip()
    if not text:
        raise ParseError("No text content found in file", hint=EMPTY_HINTS[source_type])

    logger.info("text_extracted source_type=%s parser=%s chars=%s", source_type, parser, len(text))
    return ExtractedText(text=text, source_type=source_type, parser=parser, warnings=warnings)
