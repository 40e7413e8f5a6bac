from __future__ import annotations

from fastapi import APIRouter, Query

from telemetry_api.core.metrics import DASHBOARD_REQUESTS
from telemetry_api.core.settings import get_settings
from telemetry_api.services.dashboard import get_dashboard
from telemetry_api.utils.error_payloads import success_payload


router = APIRouter(tags=["dashboard"])

_settings = get_settings()


@router.get("/dashboard")
def dashboard(
    device_id: str | None = Query(default=None, alias="deviceId", max_length=255),
    hours: int | None = Query(default=None, ge=1, le=_settings.dashboard_max_hours),
    limit: int | None = Query(default=None, ge=1, le=_settings.dashboard_max_limit),
) -> dict:
    DASHBOARD_REQUESTS.inc()
    data = get_dashboard(device_external_id=device_id or None, hours=hours, limit=limit)
    return success_payload(data.model_dump(mode="json", by_alias=True))
