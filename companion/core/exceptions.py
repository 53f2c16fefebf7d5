"""Application exception classes and handlers."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Validation (400) ---


class EmptyMessageError(AppException):
    """Submitted message is empty or whitespace only."""

    def __init__(self) -> None:
        super().__init__(
            message="Message must not be empty",
            code="EMPTY_MESSAGE",
            status_code=400,
        )


# --- Not Found (404) ---


class SessionNotFoundError(AppException):
    """Chat session not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Chat session not found",
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


# --- Conflict (409) ---


class TurnInProgressError(AppException):
    """A reply is still pending for this session."""

    def __init__(self) -> None:
        super().__init__(
            message="A reply is still pending for this conversation",
            code="TURN_IN_PROGRESS",
            status_code=409,
        )


# --- Upstream model (502) ---
# Raised inside the completion and suggestion services and absorbed by their
# fallback chains.


class UpstreamModelError(AppException):
    """The language-model call failed (network, timeout or provider error)."""

    def __init__(self, message: str = "Language model request failed") -> None:
        super().__init__(message=message, code="UPSTREAM_MODEL_ERROR", status_code=502)


class ParseError(AppException):
    """Model output could not be decomposed into suggestions."""

    def __init__(self, message: str = "Could not parse model output") -> None:
        super().__init__(message=message, code="PARSE_ERROR", status_code=502)


# --- Persistence (503) ---


class StoreError(AppException):
    """A persistence operation failed."""

    def __init__(self, message: str = "Could not save your changes") -> None:
        super().__init__(message=message, code="STORE_ERROR", status_code=503)


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": exc.code,
                "message": exc.message,
            },
        },
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures in the application error envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": f"{location}: {detail}" if location else detail,
            },
        },
    )
