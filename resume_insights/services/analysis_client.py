# resume_insights/services/analysis_client.py
"""
Boundary to the external AI service.

Three calls, each returning validated structured data or raising:
  assess(text, job_description=None)            -> ResumeAnalysis
  generate_questions(text, job_description, n)  -> list[InterviewQuestion]
  recommend_companies(skills, level, industry)  -> list[CompanyDraft]

Adapter/transport failures raise ExternalServiceError; answers that are not
the expected JSON raise AnalysisUnavailable. Nothing is retried or cached.
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from resume_insights.core.errors import AnalysisUnavailable, ExternalServiceError
from resume_insights.models.company import CompanyDraft
from resume_insights.models.resume import InterviewQuestion, ResumeAnalysis

logger = logging.getLogger(__name__)

TASK_ASSESS = "assess"
TASK_QUESTIONS = "interview_questions"
TASK_RECOMMEND = "recommend_companies"

ASSESS_PROMPT = """You are an expert resume analyzer and career coach.

Analyze the following resume and provide a comprehensive assessment.

Resume Text:
{resume_text}
{job_section}
Respond ONLY with valid JSON (no markdown, no explanations) in this shape:
{{
  "atsScore": number (0-100),
  "extractedSkills": ["skill1", "skill2"],
  "experience": "summary of experience level",
  "education": "summary of education",
  "summary": "brief professional summary",
  "recommendations": ["recommendation1", "recommendation2"],
  "keywords": ["keyword1", "keyword2"],
  "missingKeywords": ["missing1", "missing2"]
}}

Focus on ATS compatibility (keyword matching, formatting, clarity), skill
extraction and relevance, experience level, and areas for improvement.
"""

QUESTIONS_PROMPT = """You are an expert interview coach.

Generate {count} relevant interview questions based on the following resume and job description.

Resume Text:
{resume_text}

Job Description:
{job_description}

Include a mix of technical, behavioral, situational and company-specific questions.

Respond ONLY with valid JSON in this shape:
{{
  "questions": [
    {{"question": "question text", "category": "technical|behavioral|situational|company", "difficulty": "easy|medium|hard"}}
  ]
}}
"""

RECOMMEND_PROMPT = """You are an expert career advisor and company researcher.

Based on the following profile, suggest {count} companies that are hiring for these skills and would be a good match.

Skills: {skills}
Experience Level: {experience_level}
{industry_line}
Respond ONLY with valid JSON in this shape:
{{
  "companies": [
    {{
      "name": "company name",
      "industry": "industry",
      "size": "startup|small|medium|large|enterprise",
      "location": {{"city": "city", "state": "state", "country": "country"}},
      "description": "brief company description",
      "requiredSkills": [{{"skill": "skill name", "importance": "low|medium|high|critical"}}],
      "preferredSkills": ["skill1", "skill2"],
      "experienceLevel": "entry|mid|senior|executive",
      "jobTitles": ["title1", "title2"],
      "benefits": ["benefit1", "benefit2"],
      "companyCulture": "brief culture description",
      "matchPercentage": number (0-100)
    }}
  ]
}}
"""


def _string_list(v) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        v = [v]
    out = []
    for item in v:
        if isinstance(item, (str, int, float)) and str(item).strip():
            out.append(str(item).strip())
    return out


class AssessmentPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ats_score: int
    extracted_skills: List[str] = Field(default_factory=list)
    experience: str = ""
    education: str = ""
    summary: str = ""
    recommendations: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    missing_keywords: List[str] = Field(default_factory=list)

    @field_validator("ats_score", mode="before")
    @classmethod
    def _clamp_score(cls, v):
        value = float(v)
        if not math.isfinite(value):
            raise ValueError("atsScore must be a finite number")
        return max(0, min(100, round(value)))

    @field_validator("extracted_skills", "recommendations", "keywords", "missing_keywords", mode="before")
    @classmethod
    def _lists(cls, v):
        return _string_list(v)

    @field_validator("experience", "education", "summary", mode="before")
    @classmethod
    def _text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (list, dict)):
            return json.dumps(v, ensure_ascii=False)
        return str(v).strip()

    def to_analysis(self) -> ResumeAnalysis:
        skills = []
        seen = set()
        for s in self.extracted_skills:
            if s.lower() not in seen:
                seen.add(s.lower())
                skills.append(s)
        return ResumeAnalysis(
            ats_score=self.ats_score,
            extracted_skills=skills,
            experience_summary=self.experience,
            education_summary=self.education,
            professional_summary=self.summary,
            recommendations=self.recommendations,
            keywords=self.keywords,
            missing_keywords=self.missing_keywords,
        )


def _strip_fences(raw: str) -> str:
    text = (raw or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_object(raw: str, task: str) -> Dict[str, Any]:
    try:
        data = json.loads(_strip_fences(raw))
    except (TypeError, ValueError) as exc:
        logger.warning("Non-JSON response for %s: %.200r", task, raw)
        raise AnalysisUnavailable(f"Failed to parse AI response for {task}", task=task) from exc
    if not isinstance(data, dict):
        raise AnalysisUnavailable(f"Expected a JSON object for {task}", task=task)
    return data


def _coerce_choice(value, allowed, default):
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


class AnalysisClient:
    def __init__(self, adapter, question_count: int = 10, company_count: int = 10):
        self.adapter = adapter
        self.question_count = question_count
        self.company_count = company_count

    async def _call(self, task: str, prompt: str) -> Dict[str, Any]:
        try:
            raw = await self.adapter.generate(task, prompt)
        except Exception as exc:
            logger.warning("AI call %s failed: %s", task, exc)
            raise ExternalServiceError(f"AI service call failed for {task}: {exc}", task=task) from exc
        return parse_json_object(raw, task)

    async def assess(self, text: str, job_description: Optional[str] = None) -> ResumeAnalysis:
        job_section = f"\nJob Description:\n{job_description}\n" if job_description else ""
        data = await self._call(TASK_ASSESS, ASSESS_PROMPT.format(resume_text=text, job_section=job_section))
        try:
            payload = AssessmentPayload.model_validate(data)
        except (ValidationError, TypeError, ValueError, OverflowError) as exc:
            raise AnalysisUnavailable(f"Malformed assessment: {exc}", task=TASK_ASSESS) from exc
        return payload.to_analysis()

    async def generate_questions(self, text: str, job_description: str, count: Optional[int] = None) -> List[InterviewQuestion]:
        count = count or self.question_count
        prompt = QUESTIONS_PROMPT.format(count=count, resume_text=text, job_description=job_description)
        data = await self._call(TASK_QUESTIONS, prompt)
        items = data.get("questions")
        if not isinstance(items, list):
            raise AnalysisUnavailable("Response has no questions list", task=TASK_QUESTIONS)

        questions = []
        for item in items:
            if not isinstance(item, dict) or not str(item.get("question") or "").strip():
                continue
            questions.append(InterviewQuestion(
                question=str(item["question"]).strip(),
                category=_coerce_choice(item.get("category"), ("technical", "behavioral", "situational", "company"), "behavioral"),
                difficulty=_coerce_choice(item.get("difficulty"), ("easy", "medium", "hard"), "medium"),
            ))
        return questions

    async def recommend_companies(self, skills: List[str], experience_level: str = "mid",
                                  industry: Optional[str] = None) -> List[CompanyDraft]:
        prompt = RECOMMEND_PROMPT.format(
            count=self.company_count,
            skills=", ".join(skills),
            experience_level=experience_level,
            industry_line=f"Preferred Industry: {industry}\n" if industry else "",
        )
        data = await self._call(TASK_RECOMMEND, prompt)
        items = data.get("companies")
        if not isinstance(items, list):
            raise AnalysisUnavailable("Response has no companies list", task=TASK_RECOMMEND)

        drafts = []
        for item in items:
            try:
                drafts.append(CompanyDraft.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping malformed company recommendation: %s", exc.errors()[:1])
        return drafts
