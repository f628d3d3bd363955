# resume_insights/models/resume.py
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, timezone
from bson import ObjectId

QuestionCategory = Literal["technical", "behavioral", "situational", "company"]
QuestionDifficulty = Literal["easy", "medium", "hard"]
DeclaredFormat = Literal["pdf", "doc", "docx"]


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


class ResumeAnalysis(BaseModel):
    ats_score: int = Field(default=0, ge=0, le=100)
    extracted_skills: List[str] = Field(default_factory=list)
    experience_summary: str = ""
    education_summary: str = ""
    professional_summary: str = ""
    recommendations: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)


class InterviewQuestion(BaseModel):
    question: str
    category: QuestionCategory = "behavioral"
    difficulty: QuestionDifficulty = "medium"


class ResumeRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_id: str
    original_name: str
    storage_location: str
    size_bytes: int
    declared_format: DeclaredFormat
    uploaded_at: datetime = Field(default_factory=utcnow)
    analysis: Optional[ResumeAnalysis] = None
    interview_questions: List[InterviewQuestion] = Field(default_factory=list)
    is_analyzed: bool = False
    analyzed_at: Optional[datetime] = None
    is_active: bool = True

    def summary(self) -> "ResumeSummary":
        return ResumeSummary(
            id=self.id,
            original_name=self.original_name,
            uploaded_at=self.uploaded_at,
            ats_score=self.analysis.ats_score if self.analysis else None,
            is_analyzed=self.is_analyzed,
            file_size=format_file_size(self.size_bytes),
            declared_format=self.declared_format,
        )

    def public_view(self) -> "ResumeDetail":
        # storage_location stays server-side
        return ResumeDetail(**self.model_dump(exclude={"storage_location"}))


class ResumeSummary(BaseModel):
    id: str
    original_name: str
    uploaded_at: datetime
    ats_score: Optional[int] = None
    is_analyzed: bool
    file_size: str
    declared_format: DeclaredFormat


class ResumeDetail(BaseModel):
    id: str
    owner_id: str
    original_name: str
    size_bytes: int
    declared_format: DeclaredFormat
    uploaded_at: datetime
    analysis: Optional[ResumeAnalysis] = None
    interview_questions: List[InterviewQuestion] = Field(default_factory=list)
    is_analyzed: bool
    analyzed_at: Optional[datetime] = None
    is_active: bool
