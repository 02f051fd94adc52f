"""
HTTP middleware and response helpers shared by every router.
"""

import json
import logging
import time
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.dependencies import get_trace_id
from llm_gateway.errors import InvalidRequestError

logger = logging.getLogger(__name__)


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Attach a trace id to every request and echo it on the response."""

    async def dispatch(self, request: Request, call_next):
        trace_id = get_trace_id(request)
        started = time.monotonic()
        response = await call_next(request)
        response.headers["x-trace-id"] = trace_id
        response.headers.setdefault("cache-control", "no-store")
        elapsed = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[{trace_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed}ms)"
        )
        return response


async def read_json_body(request: Request) -> Any:
    """Raw JSON body; an empty body reads as {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise InvalidRequestError("Invalid JSON body")


def json_response(status_code: int, body: Any, trace_id: Optional[str] = None) -> JSONResponse:
    headers = {"cache-control": "no-store"}
    if trace_id:
        headers["x-trace-id"] = trace_id
    return JSONResponse(status_code=status_code, content=body, headers=headers)
