# resume_insights/services/text_extractor.py
"""
Text extraction from stored resumes.

The source is a tagged variant: a local path, a remote URL, or an in-memory
buffer. Each variant only knows how to obtain bytes; every variant then goes
through the same decode step, which recognises PDF (pdfminer.six) and DOCX
(python-docx) by content signature.

Extraction is all-or-nothing: it returns the full text or raises an
ExtractionError subclass.
"""

import asyncio
import enum
import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Optional, Union

import aiofiles
import httpx

from resume_insights.core.errors import (
    ExtractionFailed,
    FetchFailed,
    UnsupportedFormat,
)

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
ZIP_MAGIC = b"PK\x03\x04"
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"  # legacy .doc
REMOTE_PREFIXES = ("http://", "https://")


class SourceKind(str, enum.Enum):
    LOCAL_PATH = "local_path"
    REMOTE_URL = "remote_url"
    BUFFER = "buffer"


@dataclass(frozen=True)
class ExtractionSource:
    kind: SourceKind
    value: Union[str, bytes]

    @classmethod
    def local_path(cls, path: str) -> "ExtractionSource":
        return cls(SourceKind.LOCAL_PATH, str(path))

    @classmethod
    def remote_url(cls, url: str) -> "ExtractionSource":
        return cls(SourceKind.REMOTE_URL, url)

    @classmethod
    def buffer(cls, data: bytes) -> "ExtractionSource":
        return cls(SourceKind.BUFFER, bytes(data))

    @classmethod
    def from_location(cls, location: str) -> "ExtractionSource":
        """Classify a storage locator: URL scheme prefix means remote, anything else is a path."""
        if location.lower().startswith(REMOTE_PREFIXES):
            return cls.remote_url(location)
        return cls.local_path(location)


def _is_docx(b: bytes) -> bool:
    if not b.startswith(ZIP_MAGIC):
        return False
    try:
        with zipfile.ZipFile(io.BytesIO(b)) as zf:
            return "word/document.xml" in zf.namelist()
    except (zipfile.BadZipFile, ValueError, OSError):
        return False


def parse_pdf_bytes(b: bytes) -> str:
    """
    Extract text from PDF bytes using pdfminer.six high-level API.
    """
    from pdfminer.high_level import extract_text_to_fp

    output = io.StringIO()
    stream = io.BytesIO(b)
    # leave codec/params as defaults
    extract_text_to_fp(stream, output, laparams=None)
    return output.getvalue()


def parse_docx_bytes(b: bytes) -> str:
    from docx import Document

    doc = Document(io.BytesIO(b))
    parts = [p.text.strip() for p in doc.paragraphs if p.text and p.text.strip()]
    # skills are often laid out in tables
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text and c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def decode_document(b: bytes) -> str:
    """
    Shared decode step. Raises UnsupportedFormat or ExtractionFailed.
    """
    if not b:
        raise ExtractionFailed("Document is empty")

    if b.startswith(PDF_MAGIC):
        decoder, kind = parse_pdf_bytes, "pdf"
    elif _is_docx(b):
        decoder, kind = parse_docx_bytes, "docx"
    elif b.startswith(OLE_MAGIC):
        raise UnsupportedFormat("Legacy .doc documents cannot be text-extracted")
    else:
        raise UnsupportedFormat("Document is neither a PDF nor a DOCX file")

    try:
        text = decoder(b)
    except Exception as exc:
        # malformed, truncated or encrypted content
        raise ExtractionFailed(f"Could not read {kind} content: {exc}", cause=exc) from exc

    text = text.replace("\x0c", "\n").strip()
    if not text:
        raise ExtractionFailed(f"No extractable text in {kind} document")
    return text


class TextExtractor:
    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, fetch_timeout: float = 30.0):
        self._http_client = http_client
        self._fetch_timeout = fetch_timeout
        self._readers = {
            SourceKind.LOCAL_PATH: self._read_local,
            SourceKind.REMOTE_URL: self._fetch_remote,
            SourceKind.BUFFER: self._read_buffer,
        }

    async def extract(self, source: ExtractionSource) -> str:
        reader = self._readers[source.kind]
        data = await reader(source.value)
        logger.debug("Decoding %s bytes from %s source", len(data), source.kind.value)
        # pdfminer/python-docx are CPU bound; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, decode_document, data)

    async def _read_local(self, path: str) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as fh:
                return await fh.read()
        except OSError as exc:
            raise ExtractionFailed(f"Cannot read {path}: {exc.strerror or exc}", cause=exc) from exc

    async def _fetch_remote(self, url: str) -> bytes:
        if self._http_client is not None:
            return await self._get(self._http_client, url)
        async with httpx.AsyncClient(follow_redirects=True, timeout=self._fetch_timeout) as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise FetchFailed(f"{type(exc).__name__}: {exc}") from exc
        if not resp.is_success:
            raise FetchFailed(f"{resp.status_code} {resp.reason_phrase}".strip())
        return resp.content

    async def _read_buffer(self, data: bytes) -> bytes:
        return data

