from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)

    def payload(self) -> dict[str, Any]:
        return {"error": self.message, "errors": self.errors}


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized, invalid or missing token"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UnsupportedFileTypeError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Unsupported file type"


class FileTooLargeError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File too large"


class ParseError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Unable to extract text from file"

    def __init__(self, message: str | None = None, *, hint: str | None = None):
        super().__init__(message)
        self.hint = hint

    def payload(self) -> dict[str, Any]:
        body = super().payload()
        if self.hint:
            body["hint"] = self.hint
        return body


class ExternalServiceError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "AI service is unavailable. Try again later."


class ServerError(AppError):
    pass


def _field_from_loc(loc: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(part) for part in loc if part not in {"body", "query", "path", "header"}]
    return ".".join(parts) or "request"


def register_error_handlers(app: FastAPI, *, expose_details: bool) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request_failed path=%s error=%s", request.url.path, exc.message)
        else:
            logger.info("request_rejected path=%s status=%s error=%s", request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": _field_from_loc(item.get("loc", ())), "message": str(item.get("msg", "Invalid value"))}
            for item in exc.errors()
        ]
        logger.info("request_validation_failed path=%s fields=%s", request.url.path, [e["field"] for e in errors])
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=ValidationError(errors).payload())

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error path=%s", request.url.path)
        body: dict[str, Any] = {"error": ServerError.default_message}
        if expose_details:
            body["details"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
