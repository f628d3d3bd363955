# resume_insights/services/orchestrator.py
"""
Upload and analysis orchestration for resumes.

Per-document states:

  UPLOADED -> PERSISTED -> SKIPPED | SUCCEEDED | FAILED

- The record is stored before any AI call, so an upload succeeds even when the
  analysis does not.
- Extraction errors and AI failures are recovered here: they are logged and
  reported back as a warning next to the (persisted) record.
- A failed interview-question call never undoes a successful assessment.
- Re-analysis replaces `analysis` and `interview_questions` wholesale; when it
  fails, the previous analysis stays in place.

Nothing is cached or retried.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from resume_insights.core.errors import (
    ExternalServiceError,
    ExtractionError,
    NotFoundError,
    UnsupportedFormat,
    ValidationError,
)
from resume_insights.models.resume import InterviewQuestion, ResumeRecord, utcnow
from resume_insights.services.history_query import Page, PageRequest, ResumeHistoryQuery, run_query
from resume_insights.services.skill_matcher import matched_skills
from resume_insights.services.text_extractor import ExtractionSource
from resume_insights.services.upload_gate import IncomingFile

logger = logging.getLogger(__name__)


class AnalysisState(str, enum.Enum):
    UPLOADED = "uploaded"
    PERSISTED = "persisted"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# allowed transitions; anything else is a programming error
_TRANSITIONS = {
    AnalysisState.UPLOADED: {AnalysisState.PERSISTED},
    AnalysisState.PERSISTED: {AnalysisState.SKIPPED, AnalysisState.SUCCEEDED, AnalysisState.FAILED},
}


@dataclass
class AnalysisOutcome:
    resume: ResumeRecord
    state: AnalysisState
    warning: Optional[str] = None
    questions_warning: Optional[str] = None

    @property
    def analyzed(self) -> bool:
        return self.state == AnalysisState.SUCCEEDED

    def advance(self, new_state: AnalysisState, warning: Optional[str] = None) -> "AnalysisOutcome":
        if new_state not in _TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Illegal analysis transition {self.state.value} -> {new_state.value}")
        logger.debug("Resume %s: %s -> %s", self.resume.id, self.state.value, new_state.value)
        self.state = new_state
        if warning:
            self.warning = warning
        return self


class AnalysisOrchestrator:
    def __init__(self, repository, object_store, extractor, client, gate,
                 analysis_enabled: bool = True, question_count: int = 10):
        self.repository = repository
        self.object_store = object_store
        self.extractor = extractor
        self.client = client
        self.gate = gate
        self.analysis_enabled = analysis_enabled
        self.question_count = question_count

    async def upload(self, owner_id: str, files: Sequence[Optional[IncomingFile]],
                     job_description: Optional[str] = None) -> AnalysisOutcome:
        """
        Admit, store, persist, then analyze one uploaded resume.
        Raises UploadRejected before anything is stored.
        """
        incoming = self.gate.admit(files)
        job_description = (job_description or "").strip() or None

        location = await self.object_store.put(incoming.data, incoming.name, incoming.declared_mime_type)
        record = ResumeRecord(
            owner_id=owner_id,
            original_name=incoming.name,
            storage_location=location,
            size_bytes=incoming.size_bytes,
            declared_format=incoming.declared_format,
        )
        outcome = AnalysisOutcome(resume=record, state=AnalysisState.UPLOADED)

        try:
            await self.repository.create(record)
        except Exception:
            logger.warning("Persisting resume %s failed; removing stored object %s", record.id, location)
            await self.object_store.delete(location)
            raise
        outcome.advance(AnalysisState.PERSISTED)
        logger.info("Resume %s persisted for owner %s (%s bytes)", record.id, owner_id, record.size_bytes)

        return await self._analyze(outcome, job_description)

    async def reanalyze(self, owner_id: str, resume_id: str,
                        job_description: Optional[str] = None) -> AnalysisOutcome:
        record = await self.repository.find_owned(resume_id, owner_id)
        if record is None:
            raise NotFoundError("Resume not found")
        job_description = (job_description or "").strip() or None
        outcome = AnalysisOutcome(resume=record, state=AnalysisState.PERSISTED)
        return await self._analyze(outcome, job_description)

    async def _source_for(self, location: str) -> ExtractionSource:
        # objects behind the s3:// scheme are only reachable through the store client
        if self.object_store.is_s3_location(location):
            return ExtractionSource.buffer(await self.object_store.get(location))
        return ExtractionSource.from_location(location)

    async def _analyze(self, outcome: AnalysisOutcome, job_description: Optional[str]) -> AnalysisOutcome:
        record = outcome.resume

        if not self.analysis_enabled:
            return outcome.advance(AnalysisState.SKIPPED, "Analysis is disabled")

        try:
            source = await self._source_for(record.storage_location)
            text = await self.extractor.extract(source)
        except UnsupportedFormat as exc:
            logger.info("Resume %s: analysis skipped, %s", record.id, exc.message)
            return outcome.advance(AnalysisState.SKIPPED, f"Analysis skipped: {exc.message}")
        except ExtractionError as exc:
            logger.warning("Resume %s: text extraction failed: %s", record.id, exc.message)
            return outcome.advance(AnalysisState.FAILED, f"Text extraction failed: {exc.message}")
        except OSError as exc:
            logger.warning("Resume %s: stored bytes unavailable: %s", record.id, exc)
            return outcome.advance(AnalysisState.FAILED, "Stored resume could not be read")

        try:
            analysis = await self.client.assess(text, job_description)
        except ExternalServiceError as exc:
            logger.warning("Resume %s: AI analysis failed: %s", record.id, exc.message)
            return outcome.advance(AnalysisState.FAILED, "Resume saved, but AI analysis is currently unavailable")

        # a keyword the candidate already covers is not missing
        covered = {k.lower() for k in matched_skills(analysis.extracted_skills, analysis.missing_keywords)}
        if covered:
            analysis.missing_keywords = [k for k in analysis.missing_keywords if k.lower() not in covered]

        questions: List[InterviewQuestion] = []
        if job_description:
            try:
                questions = await self.client.generate_questions(text, job_description, self.question_count)
            except ExternalServiceError as exc:
                logger.warning("Resume %s: interview questions failed: %s", record.id, exc.message)
                outcome.questions_warning = "Interview questions could not be generated"

        record.analysis = analysis
        record.interview_questions = questions
        record.is_analyzed = True
        record.analyzed_at = utcnow()
        await self.repository.update(record)
        logger.info("Resume %s analyzed (ats_score=%s, %d questions)", record.id, analysis.ats_score, len(questions))
        return outcome.advance(AnalysisState.SUCCEEDED)

    async def get_resume(self, owner_id: str, resume_id: str) -> ResumeRecord:
        record = await self.repository.find_owned(resume_id, owner_id)
        if record is None:
            raise NotFoundError("Resume not found")
        return record

    async def delete_resume(self, owner_id: str, resume_id: str) -> ResumeRecord:
        """Soft delete: mark inactive and release the stored bytes."""
        record = await self.repository.find_owned(resume_id, owner_id)
        if record is None:
            raise NotFoundError("Resume not found")
        record.is_active = False
        await self.repository.update(record)
        released = await self.object_store.delete(record.storage_location)
        if not released:
            logger.warning("Resume %s deleted but its stored bytes were not released", record.id)
        logger.info("Resume %s soft-deleted", record.id)
        return record

    async def history(self, owner_id: str, page: int = 1, page_size: int = 10, max_page_size: int = 100,
                      sort_by: Optional[str] = None, sort_order: Optional[str] = None,
                      search: Optional[str] = None, is_analyzed: Optional[bool] = None,
                      declared_format: Optional[str] = None) -> Page:
        query = ResumeHistoryQuery.build(owner_id, search=search, is_analyzed=is_analyzed,
                                         declared_format=declared_format, sort_by=sort_by, sort_order=sort_order)
        return await run_query(self.repository, query, PageRequest.build(page, page_size, max_page_size))

    async def skills_for(self, owner_id: str, resume_id: str) -> List[str]:
        record = await self.get_resume(owner_id, resume_id)
        if not record.is_analyzed or record.analysis is None:
            raise ValidationError("Resume has not been analyzed yet")
        return list(record.analysis.extracted_skills)
