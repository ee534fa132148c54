import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from monitor_web.api.rate_limit import increment_rate_limit_exceeded, limiter
from monitor_web.api.routes_alerts import router as alerts_router
from monitor_web.api.routes_dashboard import router as dashboard_router
from monitor_web.api.routes_health import router as health_router
from monitor_web.api.routes_metrics import router as metrics_router
from monitor_web.core.config import settings
from monitor_web.core.errors import register_error_handlers
from monitor_web.core.logger import init_logging, log_context
from monitor_web.core.monitoring import init_monitoring
from monitor_web.db import session as db_session
from monitor_web.db.base_class import Base
from monitor_web.models import alert_models  # noqa: F401 - registers alert tables on Base.metadata

logger = logging.getLogger("monitor_web")

STATIC_DIR = Path(__file__).resolve().parents[1] / "static"


async def _rate_limit_handler(request, exc: RateLimitExceeded):
    increment_rate_limit_exceeded()
    return JSONResponse(status_code=429, content={"error": "Too many requests"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Content-Security-Policy", settings.CONTENT_SECURITY_POLICY)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, max_body: int = 1024 * 1024) -> None:
        super().__init__(app)
        self.max_body = max_body

    async def dispatch(self, request, call_next):  # type: ignore[override]
        # Check Content-Length header early if provided
        length_header = request.headers.get("content-length")
        if length_header:
            try:
                if int(length_header) > self.max_body:
                    return JSONResponse(status_code=413, content={"error": "Request body too large"})
            except ValueError:
                pass
        return await call_next(request)


def create_tables() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("Database tables migrated successfully", extra=log_context())


def create_app() -> FastAPI:
    init_logging()
    init_monitoring()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_body=settings.MAX_ALERT_BODY_BYTES)
    register_error_handlers(app)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(alerts_router, tags=["alerts"])
    app.include_router(dashboard_router)
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)

    @app.on_event("startup")
    async def startup_event():
        if settings.AUTO_CREATE_TABLES:
            create_tables()

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on MONITOR_WEB_WEB_PORT."""
    logger.info("Starting web server", extra=log_context(port=settings.WEB_PORT))
    uvicorn.run(app, host="0.0.0.0", port=settings.WEB_PORT, log_config=None)
