# resume_insights/api/v1/deps.py
from fastapi import HTTPException, Request

from resume_insights.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return services
