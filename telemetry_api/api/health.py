from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from telemetry_api.core.settings import get_settings
from telemetry_api.db.session import run_with_db_retry
from telemetry_api.utils.error_payloads import utc_timestamp


router = APIRouter(tags=["health"])
metrics_router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


def check_database() -> bool:
    def _op(session):
        session.execute(text("SELECT 1"))

    try:
        run_with_db_retry(_op, operation_name="health")
    except Exception as exc:
        logger.warning("health_db_unreachable", extra={"detail": str(exc)})
        return False
    return True


@router.get("/health")
def health(request: Request) -> dict:
    """Liveness and database status. Always answers 200; the body carries the verdict."""
    settings = get_settings()
    connected = check_database()
    started_at = getattr(request.app.state, "started_at", None) or datetime.now(timezone.utc)
    uptime = int((datetime.now(timezone.utc) - started_at).total_seconds())
    return {
        "success": connected,
        "data": {
            "status": "healthy" if connected else "unhealthy",
            "database": "connected" if connected else "disconnected",
            "uptime": uptime,
            "version": settings.app_version,
        },
        "timestamp": utc_timestamp(),
    }


@metrics_router.get("/metrics")
def metrics() -> Response:
    from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

    multiproc_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")
    if multiproc_dir:
        from prometheus_client import multiprocess

        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
