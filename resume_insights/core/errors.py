# resume_insights/core/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

- AdmissionError / UploadRejected: bad upload (type, size, count, missing file)
- ExtractionError: document bytes could not be turned into text
- ExternalServiceError / AnalysisUnavailable: the AI service failed or answered garbage
- ValidationError: malformed request parameters
- NotFoundError: record absent or owned by someone else
- InvalidRating: vote outside [1, 5]
"""

from typing import Optional


class ResumeInsightsError(Exception):
    """Base class for every error raised by the pipeline."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class AdmissionError(ResumeInsightsError):
    pass


class UploadRejected(AdmissionError):
    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"
    TOO_MANY_FILES = "TooManyFiles"
    MISSING_FILE = "MissingFile"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind

    def __repr__(self) -> str:
        return f"UploadRejected(kind={self.kind!r}, message={self.message!r})"


class ExtractionError(ResumeInsightsError):
    pass


class UnsupportedFormat(ExtractionError):
    pass


class FetchFailed(ExtractionError):
    def __init__(self, status_info: str):
        super().__init__(f"Failed to fetch document: {status_info}")
        self.status_info = status_info


class ExtractionFailed(ExtractionError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ExternalServiceError(ResumeInsightsError):
    def __init__(self, message: str, task: Optional[str] = None):
        super().__init__(message)
        self.task = task


class AnalysisUnavailable(ExternalServiceError):
    pass


class ValidationError(ResumeInsightsError):
    pass


class NotFoundError(ResumeInsightsError):
    pass


class InvalidRating(ResumeInsightsError):
    pass
