# resume_insights/api/v1/schemas.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List

from resume_insights.models.company import CompanyMatch, CompanySummary, ExperienceLevel
from resume_insights.models.resume import InterviewQuestion, ResumeAnalysis, ResumeSummary
from resume_insights.services.history_query import Pagination


class AnalyzeRequest(BaseModel):
    resume_id: str = Field(min_length=1)
    job_description: Optional[str] = None


class MatchRequest(BaseModel):
    skills: Optional[List[str]] = None
    # use the extracted skills of an analyzed resume instead of `skills`
    resume_id: Optional[str] = None
    experience_level: ExperienceLevel = "mid"
    industry: Optional[str] = None

    @model_validator(mode="after")
    def _skills_or_resume(self):
        if not self.resume_id and not [s for s in (self.skills or []) if s and s.strip()]:
            raise ValueError("At least one skill is required")
        return self


class RateRequest(BaseModel):
    rating: float


class UploadResp(BaseModel):
    success: bool = True
    message: str
    resume: ResumeSummary
    analysis_state: str
    warning: Optional[str] = None


class AnalyzeResp(BaseModel):
    success: bool
    message: str
    analysis_state: str
    analysis: Optional[ResumeAnalysis] = None
    interview_questions: List[InterviewQuestion] = Field(default_factory=list)
    warning: Optional[str] = None


class HistoryResp(BaseModel):
    success: bool = True
    resumes: List[ResumeSummary]
    pagination: Pagination


class MatchResp(BaseModel):
    success: bool = True
    companies: List[CompanyMatch]
    total_companies: int


class SearchResp(BaseModel):
    success: bool = True
    companies: List[CompanySummary]
    pagination: Pagination
