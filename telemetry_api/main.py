from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from telemetry_api.api.dashboard import router as dashboard_router
from telemetry_api.api.health import check_database, metrics_router
from telemetry_api.api.health import router as health_router
from telemetry_api.api.telemetry import router as telemetry_router
from telemetry_api.core.logging import configure_logging
from telemetry_api.core.metrics import ERROR_COUNT, REQUEST_COUNT, REQUEST_LATENCY
from telemetry_api.core.settings import get_settings
from telemetry_api.utils.error_payloads import error_payload
from telemetry_api.utils.errors import AppError
from telemetry_api.utils.request_id import REQUEST_ID_HEADER, get_request_id, set_request_id


@asynccontextmanager
async def lifespan(app: FastAPI):
    log = logging.getLogger("telemetry_api.startup")
    # A missing database is not fatal; /api/health reports it until it is reachable.
    if check_database():
        log.info("startup_db_ready")
    else:
        log.error("startup_db_unavailable")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, service=settings.app_name, env=settings.env)

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.started_at = datetime.now(timezone.utc)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        start = time.perf_counter()
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            metric_path = _metric_path_template(request)
            REQUEST_LATENCY.labels(path=metric_path).observe(time.perf_counter() - start)
            REQUEST_COUNT.labels(
                method=request.method,
                path=metric_path,
                status=str(int(status_code)),
            ).inc()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.detail.classification == "client":
            logging.getLogger("telemetry_api").warning(
                "validation_error", extra={"detail": exc.detail.message}
            )
        ERROR_COUNT.labels(code=exc.detail.code, classification=exc.detail.classification).inc()
        payload = error_payload(
            code=exc.detail.code,
            message=exc.detail.message,
            classification=exc.detail.classification,
            extra=exc.detail.extra,
        )
        return _error_response(exc.detail.status_code, payload)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = _request_validation_message(errors)
        logging.getLogger("telemetry_api").warning("validation_error", extra={"detail": message})
        ERROR_COUNT.labels(code="validation_error", classification="client").inc()
        payload = error_payload(
            code="validation_error",
            message=message,
            classification="client",
            extra={"detail": jsonable_encoder(errors)},
        )
        return _error_response(400, payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code, classification = _map_http_error(exc.status_code)
        ERROR_COUNT.labels(code=code, classification=classification).inc()
        payload = error_payload(
            code=code,
            message=str(exc.detail),
            classification=classification,
        )
        return _error_response(exc.status_code, payload)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        logging.getLogger("telemetry_api").error("db_error", extra={"detail": str(exc)})
        ERROR_COUNT.labels(code="db_error", classification="dependency").inc()
        payload = error_payload(
            code="db_error",
            message=str(exc),
            classification="dependency",
        )
        return _error_response(500, payload)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logging.getLogger("telemetry_api").exception("unhandled_error")
        ERROR_COUNT.labels(code="internal_error", classification="server").inc()
        payload = error_payload(
            code="internal_error",
            message=str(exc) or "Internal server error",
            classification="server",
        )
        return _error_response(500, payload)

    app.include_router(metrics_router)
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(telemetry_router, prefix=settings.api_prefix)
    app.include_router(dashboard_router, prefix=settings.api_prefix)

    return app


def _request_validation_message(errors: list) -> str:
    for error in errors:
        if error.get("type") == "json_invalid":
            return "Invalid JSON body"
    parts = []
    for error in errors:
        path = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{path}: {error.get('msg', 'invalid value')}")
    return "Invalid request: " + "; ".join(parts)


def _map_http_error(status_code: int) -> tuple[str, str]:
    if status_code == 404:
        return "not_found", "client"
    if status_code == 405:
        return "method_not_allowed", "client"
    if 400 <= status_code < 500:
        return "bad_request", "client"
    return "http_error", "server"


def _error_response(status_code: int, payload: dict) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=payload)
    request_id = get_request_id()
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def _metric_path_template(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str) and path:
        return path
    return request.url.path


app = create_app()
