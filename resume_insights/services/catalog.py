# resume_insights/services/catalog.py
"""
Company catalog reconciliation and skill matching.

reconcile() is first-write-wins keyed by exact company name: a recommendation
for a name already in the catalog never overwrites the stored record. The
lookup and the insert are separate operations, so two concurrent
reconciliations of a brand-new name can both insert.
"""

import logging
from typing import List, Optional

from resume_insights.core.errors import ValidationError
from resume_insights.models.company import EXPERIENCE_LEVELS, Company, CompanyDraft, CompanyMatch
from resume_insights.services import skill_matcher
from resume_insights.services.history_query import CompanySearchQuery

logger = logging.getLogger(__name__)


def clean_skills(skills) -> List[str]:
    out, seen = [], set()
    for s in skills or []:
        if not isinstance(s, str) or not s.strip():
            continue
        if s.strip().lower() not in seen:
            seen.add(s.strip().lower())
            out.append(s.strip())
    return out


def to_match(company: Company, skills: List[str]) -> CompanyMatch:
    pct = skill_matcher.score(skills, company.required_skill_names)
    return CompanyMatch(**company.summary().model_dump(), match_percentage=pct)


def rank(matches: List[CompanyMatch], companies: List[Company]) -> List[CompanyMatch]:
    """Sort by match percentage desc; ties keep catalog insertion order."""
    created = {c.id: c.created_at for c in companies}
    by_insertion = sorted(matches, key=lambda m: created[m.id])
    return sorted(by_insertion, key=lambda m: m.match_percentage, reverse=True)


class CatalogReconciler:
    def __init__(self, repository, client=None):
        self.repository = repository
        self.client = client

    async def reconcile(self, draft: CompanyDraft) -> Company:
        existing = await self.repository.find_by_name(draft.name)
        if existing is not None:
            logger.debug("Company %r already in catalog (%s)", draft.name, existing.id)
            return existing
        company = Company.from_draft(draft)
        await self.repository.create(company)
        logger.info("Added company %r to catalog (%s)", company.name, company.id)
        return company

    async def match(self, skills: List[str], experience_level: str = "mid",
                    industry: Optional[str] = None) -> List[CompanyMatch]:
        """
        Ask the AI service for recommendations, fold them into the catalog and
        score the stored companies against `skills`.
        """
        skills = clean_skills(skills)
        if not skills:
            raise ValidationError("At least one skill is required")
        if experience_level not in EXPERIENCE_LEVELS:
            raise ValidationError("Invalid experience level")
        if self.client is None:
            raise RuntimeError("CatalogReconciler.match needs an analysis client")

        drafts = await self.client.recommend_companies(skills, experience_level, (industry or "").strip() or None)

        companies: List[Company] = []
        for draft in drafts:
            try:
                companies.append(await self.reconcile(draft))
            except Exception:
                # one bad entry must not sink the whole batch
                logger.warning("Error reconciling company %r", draft.name, exc_info=True)

        matches = [to_match(c, skills) for c in companies]
        return rank(matches, companies)

    async def rank_catalog(self, skills: List[str], query: Optional[CompanySearchQuery] = None) -> List[CompanyMatch]:
        """Score the companies already in the catalog, without calling the AI service."""
        skills = clean_skills(skills)
        if not skills:
            raise ValidationError("At least one skill is required")
        query = query or CompanySearchQuery()
        companies = [c for c in await self.repository.list_active() if query.matches(c)]
        return rank([to_match(c, skills) for c in companies], companies)
