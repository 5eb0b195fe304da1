import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = {"status", "status_code", "message"}


def _failure(message: str, status_code: str, http_status: int, data=None) -> JSONResponse:
    wrapped = JsonOutResult(
        data=data,
        status="Failure",
        status_code=status_code,
        message=message
    ).model_dump()
    return JSONResponse(content=wrapped, status_code=http_status)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ())
                            if loc not in ("body", "query", "path"))
        msg = error.get("msg", "Invalid value")
        parts.append(f"{location}: {msg}" if location else msg)
    return "; ".join(parts) or "Invalid request"


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # error_response() already carries a full envelope
        if isinstance(exc.detail, dict) and ENVELOPE_KEYS.issubset(exc.detail.keys()):
            return JSONResponse(content=exc.detail, status_code=exc.status_code,
                                headers=getattr(exc, "headers", None))

        return _failure(
            message=str(exc.detail),
            status_code=str(exc.status_code or AppStatusCode.OPERATION_FAILED),
            http_status=exc.status_code or status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _failure(
            message=_format_validation_errors(exc),
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST,
            data=jsonable_errors(exc),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        reason = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        logger.warning("Integrity error on %s %s: %s",
                       request.method, request.url.path, reason)

        if "unique" in reason or "duplicate" in reason:
            return _failure(
                message="Record already exists",
                status_code=AppStatusCode.DUPLICATE_ADD_ERROR,
                http_status=status.HTTP_409_CONFLICT,
            )
        return _failure(
            message="Operation violates a data constraint",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST,
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        return _failure(
            message="Internal server error",
            status_code=AppStatusCode.OPERATION_FAILED,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"field": ".".join(str(loc) for loc in error.get("loc", ())),
         "message": error.get("msg")}
        for error in exc.errors()
    ]
