"""Domain errors and the handlers that turn them into JSON responses."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import get_logger

logger = get_logger(__name__)


class WeekenderError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(WeekenderError):
    """Malformed or missing fields on a create/update payload."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.field:
            payload["field"] = self.field
        return payload


class NotFoundError(WeekenderError):
    status_code = 404


class ExtractionFailed(WeekenderError):
    """The upstream extractor errored or returned something unusable.

    Distinct from a successful extraction that found nothing.
    """

    status_code = 502


class InvalidOrder(WeekenderError):
    """A reorder request was not a permutation of the plan's stops."""

    status_code = 400


def _field_from_loc(loc: tuple[Any, ...] | list[Any]) -> str | None:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or None


async def _weekender_error_handler(request: Request, exc: WeekenderError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    payload: dict[str, Any] = {"message": str(first.get("msg") or "Invalid request")}
    field = _field_from_loc(first.get("loc", ()))
    if field:
        payload["field"] = field
    return JSONResponse(status_code=400, content=payload)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WeekenderError, _weekender_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]


__all__ = [
    "ExtractionFailed",
    "InvalidOrder",
    "NotFoundError",
    "ValidationError",
    "WeekenderError",
    "register_error_handlers",
]
