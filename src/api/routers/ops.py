import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_settings
from storage import db
from todo_ai.config import Settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict:
    """Liveness plus, with USE_DATABASE on, task store reachability."""
    health = {
        "status": "healthy",
        "llm_provider": settings.llm_provider,
        "store": "postgres" if settings.use_database else "in-memory",
    }

    if settings.use_database:
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
