from __future__ import annotations

import time
from typing import Any, Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from . import __version__
from .api.datasets import router as datasets_router
from .api.export import router as export_router
from .api.health import router as health_router
from .api.rules import router as rules_router
from .api.search import router as search_router
from .api.validation import router as validation_router
from .config import get_settings
from .utils import configure_structured_logging


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs basic request/response info in structured JSON."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        start_time = time.time()
        log = structlog.get_logger("data_alchemist.http")
        try:
            response = await call_next(request)
        except Exception as exc:
            log.error(
                "http_request_error",
                method=request.method,
                path=request.url.path,
                status_code=500,
                duration_ms=int((time.time() - start_time) * 1000),
                error=str(exc),
            )
            raise
        log.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return response


def create_app() -> FastAPI:
    settings = get_settings()
    configure_structured_logging(settings.log_level)

    app = FastAPI(title="Data Alchemist", version=__version__)

    # CORS
    allowed = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(datasets_router)
    app.include_router(validation_router)
    app.include_router(search_router)
    app.include_router(rules_router)
    app.include_router(export_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("data_alchemist.main:app", host="0.0.0.0", port=get_settings().port)
