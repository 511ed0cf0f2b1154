"""
Error handling middleware for the HTTP surface.

Every response gets an ``X-Request-ID``. Exceptions that escape a route
become JSON: domain failures (Noji, Telegram, LLM) map to 502 since the
fault is upstream, anything else to a generic 500.
"""

import logging
import uuid
from typing import Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..domain.errors import DomainError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _error_body(message: str, request_id: str, error_type: str = None) -> dict:
    error = {"message": message}
    if error_type:
        error["type"] = error_type
    return {"error": error, "request_id": request_id}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Tags requests with an id and turns uncaught exceptions into JSON."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except HTTPException:
            raise
        except DomainError as e:
            logger.warning(
                f"Upstream failure [{request_id}] {request.method} {request.url.path}: "
                f"{type(e).__name__}: {e}"
            )
            return JSONResponse(
                status_code=502,
                content=_error_body(str(e), request_id, type(e).__name__),
                headers={REQUEST_ID_HEADER: request_id},
            )
        except Exception as e:
            logger.error(
                f"Unhandled exception [{request_id}]: {type(e).__name__}: {e}",
                exc_info=True,
                extra={"path": request.url.path, "method": request.method},
            )
            return JSONResponse(
                status_code=500,
                content=_error_body("Internal server error", request_id),
                headers={REQUEST_ID_HEADER: request_id},
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
