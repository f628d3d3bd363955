# resume_insights/api/v1/companies.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from resume_insights.api.v1.auth import get_current_user
from resume_insights.api.v1.deps import get_services
from resume_insights.api.v1.schemas import MatchRequest, MatchResp, RateRequest, SearchResp
from resume_insights.core.errors import NotFoundError
from resume_insights.services.container import ServiceContainer
from resume_insights.services.history_query import CompanySearchQuery, PageRequest, run_query
from resume_insights.services.rating import rate_company

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("/match", response_model=MatchResp)
async def match_companies(
    payload: MatchRequest,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    skills = payload.skills or []
    if payload.resume_id:
        skills = skills + await services.orchestrator.skills_for(owner_id, payload.resume_id)
    companies = await services.catalog.match(skills, payload.experience_level, payload.industry)
    return MatchResp(companies=companies, total_companies=len(companies))


@router.get("/search", response_model=SearchResp)
async def search_companies(
    search: Optional[str] = Query(None),
    industry: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    skills: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    settings = services.settings
    query = CompanySearchQuery.build(
        search=search, industry=industry, location=location, size=size,
        experience_level=experience_level, skills=skills, sort_by=sort_by, sort_order=sort_order,
    )
    page_req = PageRequest.build(page, limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    result = await run_query(services.companies, query, page_req)
    return SearchResp(companies=[c.summary() for c in result.items], pagination=result.pagination)


# static paths are registered before /{company_id}
@router.get("/industries")
async def list_industries(owner_id: str = Depends(get_current_user), services: ServiceContainer = Depends(get_services)):
    return {"success": True, "industries": await services.companies.distinct("industry")}


@router.get("/locations")
async def list_locations(owner_id: str = Depends(get_current_user), services: ServiceContainer = Depends(get_services)):
    return {"success": True, "locations": await services.companies.distinct("location.city")}


@router.get("/{company_id}")
async def get_company(
    company_id: str,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    company = await services.companies.get(company_id)
    if company is None or not company.is_active:
        raise NotFoundError("Company not found")
    return {"success": True, "company": company}


@router.post("/{company_id}/rate")
async def rate(
    company_id: str,
    payload: RateRequest,
    owner_id: str = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    company = await rate_company(services.companies, company_id, payload.rating)
    return {"success": True, "message": "Rating submitted successfully", "company": company.summary()}
