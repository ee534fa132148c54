import logging
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from monitor_web import metrics
from monitor_web.core.exceptions import MonitorWebException
from monitor_web.core.logger import log_context

logger = logging.getLogger("monitor_web.errors")


def register_error_handlers(app):
    @app.exception_handler(MonitorWebException)
    async def application_error(request: Request, exc: MonitorWebException):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            extra=log_context(code=exc.code, error_details=exc.details),
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        # Undecodable body or a field of the wrong type; pydantic detail stays in the log
        logger.warning(
            "Failed to parse request body path=%s",
            request.url.path,
            extra=log_context(errors=exc.errors()),
        )
        metrics.alert_rejected("invalid_json")
        return JSONResponse(status_code=400, content={"error": "Invalid JSON"})

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return JSONResponse(status_code=500, content={"detail": "Internal server error", "cid": correlation_id})

    return app
