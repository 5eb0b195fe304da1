import json
import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.core.schemas import JsonOutResult

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ("/openapi", "/docs", "/redoc")


def is_envelope(data) -> bool:
    return isinstance(data, dict) and {"status", "status_code", "message"}.issubset(data.keys())


class JsonResponseMiddleware(BaseHTTPMiddleware):
    """Wraps plain JSON handler output into the standard envelope."""

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path.startswith(SKIPPED_PREFIXES):
            return await call_next(request)

        response = await call_next(request)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        # Read the full body
        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk

        try:
            data = json.loads(body_bytes.decode("utf-8")) if body_bytes else None
        except ValueError:
            logger.warning("Non JSON body on %s", request.url.path)
            data = None

        headers = {k: v for k, v in response.headers.items()
                   if k.lower() != "content-length"}

        # Already wrapped by success_response() or an exception handler
        if is_envelope(data):
            return JSONResponse(content=data, status_code=response.status_code, headers=headers)

        success = 200 <= response.status_code < 400
        wrapped = JsonOutResult(
            data=data if success else None,
            status="Success" if success else "Failure",
            status_code=str(response.status_code),
            message="Data retrieved successfully" if success else str(data or "Request failed"),
        ).model_dump()

        return JSONResponse(content=wrapped, status_code=response.status_code, headers=headers)
