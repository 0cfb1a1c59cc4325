# backend/mentorhub/routes/health.py
from fastapi import APIRouter, Response

from .. import __version__
from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/health")
def health() -> dict:
    return {"status": "healthy", "version": __version__, "environment": settings.environment}


@router.get("/metrics", include_in_schema=False, response_class=Response, response_model=None)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
