# resume_insights/main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from resume_insights.api.v1.companies import router as companies_router
from resume_insights.api.v1.resumes import router as resumes_router
from resume_insights.core.config import settings
from resume_insights.core.errors import (
    ExternalServiceError,
    InvalidRating,
    NotFoundError,
    UploadRejected,
    ValidationError,
)
from resume_insights.db.mongo import close_db
from resume_insights.services.container import ServiceContainer, build_default_container

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Resume Insights API")
    app.state.services = services

    app.include_router(resumes_router, prefix="/api/v1")
    app.include_router(companies_router, prefix="/api/v1")

    @app.exception_handler(UploadRejected)
    async def upload_rejected_handler(request: Request, exc: UploadRejected):
        return _error(400, exc.message, kind=exc.kind)

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error(400, exc.message)

    @app.exception_handler(InvalidRating)
    async def rating_handler(request: Request, exc: InvalidRating):
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = str(errors[0].get("msg", "Invalid request")) if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, exc.message)

    @app.exception_handler(ExternalServiceError)
    async def external_handler(request: Request, exc: ExternalServiceError):
        logger.warning("External service failure (%s): %s", exc.task, exc.message)
        return _error(502, exc.message)

    @app.on_event("startup")
    async def startup_event():
        if app.state.services is None:
            app.state.services = await build_default_container(settings)

    @app.on_event("shutdown")
    async def shutdown_event():
        close_db()

    return app


app = create_app()
