# resume_insights/api/v1/resumes.py
"""
Resume endpoints: upload (+ analysis), re-analysis, history, detail, delete.

Upload success is decoupled from analysis success: a stored resume is always
reported with 201, and a failed/skipped analysis comes back as `warning`.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from resume_insights.api.v1.auth import get_current_user
from resume_insights.api.v1.deps import get_services
from resume_insights.api.v1.schemas import AnalyzeRequest, AnalyzeResp, HistoryResp, UploadResp
from resume_insights.services.container import ServiceContainer
from resume_insights.services.upload_gate import IncomingFile

router = APIRouter(prefix="/resumes", tags=["resumes"])


async def _to_incoming(f: UploadFile, max_size: int) -> IncomingFile:
    name = f.filename or ""
    if f.size is not None and f.size > max_size:
        # the gate rejects it; no need to pull the bytes in
        return IncomingFile(name=name, declared_mime_type=f.content_type, size_bytes=f.size)
    data = await f.read(max_size + 1)
    size = len(data) if f.size is None else max(f.size, len(data))
    return IncomingFile(name=name, declared_mime_type=f.content_type, size_bytes=size, data=data)


@router.post("/upload", status_code=201, response_model=UploadResp)
async def upload_resume(
    resume: Optional[List[UploadFile]] = File(None),
    job_description: Optional[str] = Form(None),
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    max_size = services.settings.MAX_FILE_SIZE
    files = [await _to_incoming(f, max_size) for f in (resume or [])]
    outcome = await services.orchestrator.upload(owner_id, files, job_description)
    return UploadResp(
        message="Resume uploaded successfully",
        resume=outcome.resume.summary(),
        analysis_state=outcome.state.value,
        warning=outcome.warning or outcome.questions_warning,
    )


@router.post("/analyze", response_model=AnalyzeResp)
async def analyze_resume(
    payload: AnalyzeRequest,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    outcome = await services.orchestrator.reanalyze(owner_id, payload.resume_id, payload.job_description)
    record = outcome.resume
    return AnalyzeResp(
        success=outcome.analyzed,
        message="Resume analyzed successfully" if outcome.analyzed else "Resume analysis did not complete",
        analysis_state=outcome.state.value,
        analysis=record.analysis,
        interview_questions=record.interview_questions,
        warning=outcome.warning or outcome.questions_warning,
    )


@router.get("/history", response_model=HistoryResp)
async def resume_history(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    is_analyzed: Optional[bool] = Query(None),
    declared_format: Optional[str] = Query(None),
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    settings = services.settings
    result = await services.orchestrator.history(
        owner_id,
        page=page,
        page_size=limit or settings.DEFAULT_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        is_analyzed=is_analyzed,
        declared_format=declared_format,
    )
    return HistoryResp(resumes=[r.summary() for r in result.items], pagination=result.pagination)


@router.get("/{resume_id}")
async def get_resume(
    resume_id: str,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    record = await services.orchestrator.get_resume(owner_id, resume_id)
    return {"success": True, "resume": record.public_view()}


@router.delete("/{resume_id}")
async def delete_resume(
    resume_id: str,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    await services.orchestrator.delete_resume(owner_id, resume_id)
    return {"success": True, "message": "Resume deleted successfully"}
