# resume_insights/services/upload_gate.py
"""
Admission control for uploaded resumes.

Runs before anything is stored: the file must carry an allowed extension AND
the canonical MIME type for an allowed format, fit under the size ceiling, and
arrive alone.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Sequence

from resume_insights.core.errors import UploadRejected
from resume_insights.models.resume import format_file_size

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024

# extension -> canonical MIME type
ALLOWED_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
}
ALLOWED_MIME_TYPES = frozenset(ALLOWED_TYPES.values())


@dataclass
class IncomingFile:
    name: str
    declared_mime_type: Optional[str]
    size_bytes: int
    data: bytes = b""

    @property
    def extension(self) -> str:
        return PurePath(self.name or "").suffix.lower()

    @property
    def declared_format(self) -> str:
        return self.extension.lstrip(".")


class UploadGate:
    def __init__(self, max_file_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def admit(self, files: Sequence[Optional[IncomingFile]]) -> IncomingFile:
        """
        Return the single admitted file or raise UploadRejected.
        """
        present = [f for f in (files or []) if f is not None and f.name]
        if not present:
            raise UploadRejected(UploadRejected.MISSING_FILE, "No file uploaded. Please select a resume file.")
        if len(present) > 1:
            raise UploadRejected(UploadRejected.TOO_MANY_FILES, "Too many files. Only one file allowed.")

        f = present[0]
        mime = (f.declared_mime_type or "").split(";")[0].strip().lower()
        if f.extension not in ALLOWED_TYPES or mime not in ALLOWED_MIME_TYPES:
            logger.info("Rejected upload %r (extension=%r, mime=%r)", f.name, f.extension, mime)
            raise UploadRejected(
                UploadRejected.UNSUPPORTED_TYPE,
                "Invalid file type. Only PDF, DOCX, and DOC files are allowed.",
            )
        if f.size_bytes > self.max_file_size:
            logger.info("Rejected upload %r: %s bytes over limit %s", f.name, f.size_bytes, self.max_file_size)
            raise UploadRejected(
                UploadRejected.TOO_LARGE,
                f"File too large. Maximum size is {format_file_size(self.max_file_size)}.",
            )
        return f
