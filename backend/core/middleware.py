"""FastAPI middleware for request tracking and error mapping.

Adds:
- X-Request-ID header (generated if not provided)
- X-Process-Time header (request duration)
- request_id/workspace_id bound into structlog context, so the logs of
  a workflow run started by a request carry the request's id
- Mapping of domain exceptions to JSON error bodies
"""

import logging
import time
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import get_settings
from core.exceptions import AutomationException

logger = logging.getLogger(__name__)


def _error_body(request: Request, detail: str) -> dict:
    return {"detail": detail, "request_id": getattr(request.state, "request_id", None)}


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Add request ID and timing to every request/response."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        start_time = time.monotonic()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            workspace_id=request.headers.get("X-Workspace-ID"),
        ):
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    f"Unhandled exception on {request.method} {request.url.path}",
                    exc_info=True,
                )
                detail = "Internal server error" if get_settings().is_production else (str(exc) or "Internal server error")
                return JSONResponse(
                    status_code=500,
                    content=_error_body(request, detail),
                    headers={"X-Request-ID": request_id},
                )

            duration_ms = (time.monotonic() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"

            if not request.url.path.startswith("/health"):
                logger.log(
                    logging.WARNING if response.status_code >= 400 else logging.INFO,
                    f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)",
                )

        return response


def setup_exception_handlers(app: FastAPI) -> None:
    """Render every AutomationException as {"detail", "request_id"} with its status code."""

    @app.exception_handler(AutomationException)
    async def automation_exception_handler(request: Request, exc: AutomationException):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.message))
