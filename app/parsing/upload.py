from __future__ import annotations

import logging
import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO
from zipfile import BadZipFile, ZipFile

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.errors import FileTooLargeError, ParseError, UnsupportedFileTypeError, ValidationError
from app.parsing.extract import (
    CONTENT_TYPE_SOURCES,
    DOCX_CONTENT_TYPE,
    LEGACY_WORD_CONTENT_TYPE,
    PDF_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    normalize_content_type,
)
from app.parsing.models import StagedFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")

_EXTENSIONS = {
    PDF_CONTENT_TYPE: ".pdf",
    TEXT_CONTENT_TYPE: ".txt",
    DOCX_CONTENT_TYPE: ".docx",
    LEGACY_WORD_CONTENT_TYPE: ".doc",
}


def _zip_has_word_part(path: Path) -> bool:
    try:
        with ZipFile(path) as archive:
            return any(name.startswith("word/") for name in archive.namelist())
    except (BadZipFile, OSError):
        return False


def _is_probably_text(sample: bytes) -> bool:
    if not sample:
        return True
    if sample.startswith(UTF16_BOMS):
        return True
    if b"\x00" in sample:
        return False
    printable = sum(1 for byte in sample if byte in (9, 10, 13) or byte >= 32)
    return printable / len(sample) >= 0.75


def validate_signature(path: Path, content_type: str) -> None:
    """Check the leading bytes of a staged file against its declared type."""
    with path.open("rb") as handle:
        head = handle.read(4096)

    if content_type == PDF_CONTENT_TYPE:
        if head and not head.startswith(PDF_MAGIC):
            raise UnsupportedFileTypeError("File signature does not match .pdf content.")
        return

    if content_type == DOCX_CONTENT_TYPE:
        if head and not (head.startswith(ZIP_MAGICS) and _zip_has_word_part(path)):
            raise UnsupportedFileTypeError("File signature does not match .docx content.")
        return

    if content_type == LEGACY_WORD_CONTENT_TYPE:
        if head and not head.startswith(ZIP_MAGICS):
            raise ParseError(
                "Legacy .doc files are not supported",
                hint="Convert the document to .docx or PDF and upload it again.",
            )
        return

    if content_type == TEXT_CONTENT_TYPE and not _is_probably_text(head):
        raise UnsupportedFileTypeError("File signature does not match .txt text content.")


def _max_size_label(max_bytes: int) -> str:
    megabytes = max_bytes / (1024 * 1024)
    return f"{megabytes:g}MB"


def _open_staging_file(upload_dir: str, suffix: str) -> tuple[Path, BinaryIO]:
    os.makedirs(upload_dir, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=upload_dir)
    return Path(temp_path), os.fdopen(fd, "wb")


def _remove_staging_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


@asynccontextmanager
async def staged_upload(upload: UploadFile | None, settings: Settings) -> AsyncIterator[StagedFile]:
    """Stream an upload into a uniquely named temp file and remove it on exit.

    The size limit is enforced while streaming, so oversized files are
    rejected before any parser sees them. Disk writes, the signature check
    and the final unlink run in the threadpool. The temp file is deleted
    whether the body of the ``async with`` block succeeds or raises.
    """
    if upload is None or not upload.filename:
        raise ValidationError.single("file", "No file uploaded")

    content_type = normalize_content_type(upload.content_type)
    if content_type not in CONTENT_TYPE_SOURCES:
        raise UnsupportedFileTypeError("Invalid file type. Only PDF, DOC, DOCX, and TXT files are allowed.")

    path, handle = await run_in_threadpool(_open_staging_file, settings.upload_dir, _EXTENSIONS[content_type])
    try:
        size = 0
        try:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.max_upload_bytes:
                    logger.info(
                        "upload_rejected reason=too_large file_name=%s limit=%s",
                        upload.filename,
                        settings.max_upload_bytes,
                    )
                    raise FileTooLargeError(
                        f"File too large. Maximum size is {_max_size_label(settings.max_upload_bytes)}."
                    )
                await run_in_threadpool(handle.write, chunk)
        finally:
            await run_in_threadpool(handle.close)

        await run_in_threadpool(validate_signature, path, content_type)
        yield StagedFile(
            path=str(path),
            file_name=os.path.basename(upload.filename),
            content_type=content_type,
            size=size,
        )
    finally:
        await run_in_threadpool(_remove_staging_file, path)
