# resume_insights/services/history_query.py
"""
Filter / sort / paginate over resumes and companies.

A query object compiles two ways with the same semantics:
  - to_mongo_filter() / mongo_sort() for the Mongo repositories
  - matches() / sort_records() for the in-memory repositories

Inactive (soft-deleted) records are always excluded. Sort keys come from a
fixed allow-list; anything else raises ValidationError.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from resume_insights.core.errors import ValidationError
from resume_insights.models.company import COMPANY_SIZES, EXPERIENCE_LEVELS, Company
from resume_insights.models.resume import ResumeRecord

RESUME_SORT_FIELDS = {
    "uploaded_at": "uploaded_at",
    "original_name": "original_name",
    "ats_score": "analysis.ats_score",
    "size_bytes": "size_bytes",
    "analyzed_at": "analyzed_at",
}
COMPANY_SORT_FIELDS = {
    "rating": "rating",
    "name": "name",
    "review_count": "review_count",
    "industry": "industry",
    "created_at": "created_at",
}
DECLARED_FORMATS = ("pdf", "doc", "docx")


@dataclass(frozen=True)
class SortField:
    key: str
    path: str
    descending: bool = False


def parse_sort(sort_by: Optional[str], sort_order: Optional[str], allowed: Dict[str, str],
               default: Sequence[SortField]) -> List[SortField]:
    if not sort_by:
        return list(default)
    if sort_by not in allowed:
        raise ValidationError(f"Unsupported sort key '{sort_by}'. Allowed: {', '.join(sorted(allowed))}")
    order = (sort_order or "desc").lower()
    if order not in ("asc", "desc"):
        raise ValidationError(f"Unsupported sort order '{sort_order}'. Use 'asc' or 'desc'")
    return [SortField(sort_by, allowed[sort_by], order == "desc")]


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def _regex(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


def _resolve(obj: Any, path: str) -> Any:
    for part in path.split("."):
        if obj is None:
            return None
        obj = getattr(obj, part, None)
    return obj


def _sort_key(path: str):
    def key(record):
        value = _resolve(record, path)
        # None sorts lowest, like null in Mongo
        return (0, 0) if value is None else (1, value)
    return key


def sort_records(items: List[Any], sort_fields: Sequence[SortField]) -> List[Any]:
    # id is the final tie-breaker, matching the Mongo sort
    out = sorted(items, key=lambda r: r.id)
    for sf in reversed(list(sort_fields)):
        out.sort(key=_sort_key(sf.path), reverse=sf.descending)
    return out


def mongo_sort(sort_fields: Sequence[SortField]) -> List[Tuple[str, int]]:
    order = [(sf.path, -1 if sf.descending else 1) for sf in sort_fields]
    order.append(("_id", 1))
    return order


@dataclass
class ResumeHistoryQuery:
    owner_id: str
    search: Optional[str] = None
    is_analyzed: Optional[bool] = None
    declared_format: Optional[str] = None
    sort: List[SortField] = field(default_factory=lambda: [SortField("uploaded_at", "uploaded_at", True)])

    @classmethod
    def build(cls, owner_id: str, search: Optional[str] = None, is_analyzed: Optional[bool] = None,
              declared_format: Optional[str] = None, sort_by: Optional[str] = None,
              sort_order: Optional[str] = None) -> "ResumeHistoryQuery":
        if declared_format is not None and declared_format not in DECLARED_FORMATS:
            raise ValidationError(f"Unsupported format filter '{declared_format}'")
        sort = parse_sort(sort_by, sort_order, RESUME_SORT_FIELDS,
                          [SortField("uploaded_at", "uploaded_at", True)])
        return cls(owner_id=owner_id, search=(search or "").strip() or None, is_analyzed=is_analyzed,
                   declared_format=declared_format, sort=sort)

    def to_mongo_filter(self) -> Dict[str, Any]:
        q: Dict[str, Any] = {"owner_id": self.owner_id, "is_active": True}
        if self.search:
            q["original_name"] = _regex(self.search)
        if self.is_analyzed is not None:
            q["is_analyzed"] = self.is_analyzed
        if self.declared_format:
            q["declared_format"] = self.declared_format
        return q

    def matches(self, r: ResumeRecord) -> bool:
        if r.owner_id != self.owner_id or not r.is_active:
            return False
        if self.search and not _contains(r.original_name, self.search):
            return False
        if self.is_analyzed is not None and r.is_analyzed != self.is_analyzed:
            return False
        if self.declared_format and r.declared_format != self.declared_format:
            return False
        return True


def split_skills(skills: Optional[str]) -> List[str]:
    if not skills:
        return []
    return [s.strip() for s in skills.split(",") if s.strip()]


@dataclass
class CompanySearchQuery:
    search: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    size: Optional[str] = None
    experience_level: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    sort: List[SortField] = field(default_factory=lambda: [
        SortField("rating", "rating", True),
        SortField("name", "name", False),
    ])

    @classmethod
    def build(cls, search: Optional[str] = None, industry: Optional[str] = None, location: Optional[str] = None,
              size: Optional[str] = None, experience_level: Optional[str] = None, skills: Optional[str] = None,
              sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> "CompanySearchQuery":
        if size is not None and size not in COMPANY_SIZES:
            raise ValidationError(f"Invalid company size '{size}'")
        if experience_level is not None and experience_level not in EXPERIENCE_LEVELS:
            raise ValidationError(f"Invalid experience level '{experience_level}'")
        default = [SortField("rating", "rating", True), SortField("name", "name", False)]
        return cls(
            search=(search or "").strip() or None,
            industry=(industry or "").strip() or None,
            location=(location or "").strip() or None,
            size=size,
            experience_level=experience_level,
            skills=split_skills(skills),
            sort=parse_sort(sort_by, sort_order, COMPANY_SORT_FIELDS, default),
        )

    def to_mongo_filter(self) -> Dict[str, Any]:
        q: Dict[str, Any] = {"is_active": True}
        if self.search:
            q["$or"] = [{"name": _regex(self.search)}, {"industry": _regex(self.search)}]
        if self.industry:
            q["industry"] = _regex(self.industry)
        if self.location:
            q["location.city"] = _regex(self.location)
        if self.size:
            q["size"] = self.size
        if self.experience_level:
            q["experience_level"] = self.experience_level
        if self.skills:
            q["required_skills.skill"] = {"$in": [re.compile(re.escape(s), re.IGNORECASE) for s in self.skills]}
        return q

    def matches(self, c: Company) -> bool:
        if not c.is_active:
            return False
        if self.search and not (_contains(c.name, self.search) or _contains(c.industry, self.search)):
            return False
        if self.industry and not _contains(c.industry, self.industry):
            return False
        if self.location and not _contains(c.location.city, self.location):
            return False
        if self.size and c.size != self.size:
            return False
        if self.experience_level and c.experience_level != self.experience_level:
            return False
        if self.skills and not any(_contains(rs.skill, term) for rs in c.required_skills for term in self.skills):
            return False
        return True


@dataclass
class PageRequest:
    page: int = 1
    page_size: int = 10

    @classmethod
    def build(cls, page: int, page_size: int, max_page_size: int = 100) -> "PageRequest":
        if page < 1:
            raise ValidationError("page must be >= 1")
        if page_size < 1 or page_size > max_page_size:
            raise ValidationError(f"limit must be between 1 and {max_page_size}")
        return cls(page=page, page_size=page_size)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


class Pagination(BaseModel):
    current_page: int
    page_size: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def compute(cls, page: PageRequest, total: int) -> "Pagination":
        total_pages = math.ceil(total / page.page_size) if total else 0
        return cls(
            current_page=page.page,
            page_size=page.page_size,
            total_pages=total_pages,
            total_items=total,
            has_next_page=page.page < total_pages,
            has_prev_page=page.page > 1,
        )


@dataclass
class Page:
    items: List[Any]
    pagination: Pagination


async def run_query(repository, query, page: PageRequest) -> Page:
    items, total = await repository.search(query, skip=page.skip, limit=page.page_size)
    return Page(items=items, pagination=Pagination.compute(page, total))
