"""
Request ID middleware.

Each request gets an id (the client's X-Request-ID header if sent, a new
UUID otherwise). It is stored on ``request.state``, echoed in the response
headers and stamped on every log record emitted while the request runs.
"""

import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_request_id: ContextVar[str] = ContextVar("request_id", default="-")
_base_factory = logging.getLogRecordFactory()


def _record_factory(*args, **kwargs):
    record = _base_factory(*args, **kwargs)
    record.request_id = _request_id.get()
    return record


logging.setLogRecordFactory(_record_factory)


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        token = _request_id.set(request_id)
        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            _request_id.reset(token)


def get_request_id(request: Request) -> str:
    """Request id of ``request``, or "no-request-id" outside the middleware."""
    return getattr(request.state, "request_id", "no-request-id")
