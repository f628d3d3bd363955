# resume_insights/models/company.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal, get_args
from datetime import datetime

from resume_insights.models.resume import new_id, utcnow

CompanySize = Literal["startup", "small", "medium", "large", "enterprise"]
SkillImportance = Literal["low", "medium", "high", "critical"]
ExperienceLevel = Literal["entry", "mid", "senior", "executive"]

EXPERIENCE_LEVELS = get_args(ExperienceLevel)
COMPANY_SIZES = get_args(CompanySize)


def _enum_or_default(value, allowed, default):
    # the recommendation service does not always respect the enumerations
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def _clean_strings(values) -> List[str]:
    if not values:
        return []
    out = []
    for v in values:
        if isinstance(v, str) and v.strip():
            out.append(v.strip())
    return out


class Location(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class RequiredSkill(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    skill: str
    importance: SkillImportance = "medium"

    @field_validator("skill", mode="before")
    @classmethod
    def _strip_skill(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("importance", mode="before")
    @classmethod
    def _importance(cls, v):
        return _enum_or_default(v, get_args(SkillImportance), "medium")


class CompanyProfile(BaseModel):
    """Catalog fields shared by AI drafts and stored companies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1)
    industry: str = ""
    size: CompanySize = "medium"
    location: Location = Field(default_factory=Location)
    website: Optional[str] = None
    description: Optional[str] = None
    required_skills: List[RequiredSkill] = Field(default_factory=list)
    preferred_skills: List[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = "mid"
    job_titles: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    company_culture: Optional[str] = None

    @field_validator("name", "industry", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("size", mode="before")
    @classmethod
    def _size(cls, v):
        return _enum_or_default(v, COMPANY_SIZES, "medium")

    @field_validator("experience_level", mode="before")
    @classmethod
    def _experience_level(cls, v):
        return _enum_or_default(v, EXPERIENCE_LEVELS, "mid")

    @field_validator("preferred_skills", "job_titles", "benefits", mode="before")
    @classmethod
    def _string_lists(cls, v):
        return _clean_strings(v)

    @field_validator("location", mode="before")
    @classmethod
    def _location(cls, v):
        return v if v is not None else {}

    @field_validator("required_skills", mode="before")
    @classmethod
    def _required_skills(cls, v):
        if not v:
            return []
        out = []
        for item in v:
            # tolerate bare strings in place of {skill, importance}
            if isinstance(item, str):
                item = {"skill": item}
            if isinstance(item, dict) and isinstance(item.get("skill"), str) and item["skill"].strip():
                out.append(item)
            elif isinstance(item, RequiredSkill):
                out.append(item)
        return out

    @property
    def required_skill_names(self) -> List[str]:
        return [rs.skill for rs in self.required_skills]


class CompanyDraft(CompanyProfile):
    # the service's own estimate; stored companies are re-scored locally
    match_percentage: Optional[float] = None


class Company(CompanyProfile):
    id: str = Field(default_factory=new_id)
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_draft(cls, draft: CompanyDraft) -> "Company":
        data = draft.model_dump(exclude={"match_percentage"})
        return cls(**data)

    def summary(self) -> "CompanySummary":
        return CompanySummary(
            id=self.id,
            name=self.name,
            industry=self.industry,
            size=self.size,
            location=self.location,
            experience_level=self.experience_level,
            rating=self.rating,
            review_count=self.review_count,
            required_skills_count=len(self.required_skills),
        )


class CompanySummary(BaseModel):
    id: str
    name: str
    industry: str
    size: CompanySize
    location: Location
    experience_level: ExperienceLevel
    rating: float
    review_count: int
    required_skills_count: int


class CompanyMatch(CompanySummary):
    match_percentage: int = Field(ge=0, le=100)
