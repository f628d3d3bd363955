# resume_insights/services/container.py
"""
Explicit wiring of the pipeline. One container per application; tests build
their own with in-memory repositories and a fake adapter.
"""

import logging
from dataclasses import dataclass

from resume_insights.core.config import Settings
from resume_insights.services.analysis_client import AnalysisClient
from resume_insights.services.catalog import CatalogReconciler
from resume_insights.services.orchestrator import AnalysisOrchestrator
from resume_insights.services.storage import ObjectStore
from resume_insights.services.text_extractor import TextExtractor
from resume_insights.services.upload_gate import UploadGate

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    resumes: object
    companies: object
    object_store: ObjectStore
    client: AnalysisClient
    orchestrator: AnalysisOrchestrator
    catalog: CatalogReconciler


def build_container(settings: Settings, resumes, companies, adapter, object_store=None,
                    extractor=None) -> ServiceContainer:
    object_store = object_store or ObjectStore(settings)
    extractor = extractor or TextExtractor(fetch_timeout=settings.FETCH_TIMEOUT_SEC)
    client = AnalysisClient(
        adapter,
        question_count=settings.INTERVIEW_QUESTION_COUNT,
        company_count=settings.COMPANY_RECOMMENDATION_COUNT,
    )
    orchestrator = AnalysisOrchestrator(
        repository=resumes,
        object_store=object_store,
        extractor=extractor,
        client=client,
        gate=UploadGate(settings.MAX_FILE_SIZE),
        analysis_enabled=settings.ANALYSIS_ENABLED,
        question_count=settings.INTERVIEW_QUESTION_COUNT,
    )
    return ServiceContainer(
        settings=settings,
        resumes=resumes,
        companies=companies,
        object_store=object_store,
        client=client,
        orchestrator=orchestrator,
        catalog=CatalogReconciler(companies, client),
    )


async def build_default_container(settings: Settings) -> ServiceContainer:
    """Repositories and adapter chosen from settings (STORE_BACKEND, LLM_ADAPTER)."""
    from resume_insights.services.llm_adapter import load_adapter

    backend = (settings.STORE_BACKEND or "mongo").lower()
    if backend == "memory":
        from resume_insights.repositories.companies import InMemoryCompanyRepository
        from resume_insights.repositories.resumes import InMemoryResumeRepository

        resumes, companies = InMemoryResumeRepository(), InMemoryCompanyRepository()
    elif backend == "mongo":
        from resume_insights.db.mongo import ensure_indexes, get_db
        from resume_insights.repositories.companies import MongoCompanyRepository
        from resume_insights.repositories.resumes import MongoResumeRepository

        db = get_db(settings)
        await ensure_indexes(db)
        resumes, companies = MongoResumeRepository(db), MongoCompanyRepository(db)
    else:
        raise RuntimeError(f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}")

    logger.info("Store backend: %s", backend)
    return build_container(settings, resumes, companies, load_adapter(settings))
