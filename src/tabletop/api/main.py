from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from tabletop.api.error_handling import register_exception_handlers
from tabletop.api.middleware.request_id import RequestIDMiddleware
from tabletop.api.routes.health import router as health_router
from tabletop.api.routes.kitchen import router as kitchen_router
from tabletop.api.routes.menu import router as menu_router
from tabletop.api.routes.metrics import router as metrics_router
from tabletop.api.routes.orders import router as orders_router
from tabletop.api.routes.restaurant import router as restaurant_router
from tabletop.api.routes.tables import router as tables_router
from tabletop.api.routes.waiter import router as waiter_router
from tabletop.infrastructure.observability.logging_config import configure_logging
from tabletop.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("tabletop.api.access")

REQUEST_COUNT = Counter(
    "tabletop_http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "tabletop_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_label(request: Request) -> str:
    # templated path keeps label cardinality bounded
    route = request.scope.get("route")
    path_format = getattr(route, "path_format", None)
    return path_format or "unmatched"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            route = _route_label(request)
            REQUEST_COUNT.labels(method=method, route=route, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        route = _route_label(request)
        REQUEST_COUNT.labels(
            method=method,
            route=route,
            status_code=str(response.status_code),
        ).inc()
        REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Tabletop Backend", version="0.1.0")
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(restaurant_router)
    app.include_router(menu_router)
    app.include_router(tables_router)
    app.include_router(orders_router)
    app.include_router(waiter_router)
    app.include_router(kitchen_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
