"""Application-level exceptions and FastAPI exception handlers."""


from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")

class MismatchError(AppException):
    """Raised when joined records (candidate / offer) disagree on identity fields."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="MISMATCH")

class InvalidStateError(AppException):
    """Raised when an offer cannot make the requested transition.

    ``reason`` is one of ``already_responded``, ``expired`` or ``accepted``.
    """

    def __init__(self, message: str, reason: str):
        self.reason = reason
        super().__init__(message, status_code=409, code="INVALID_STATE")

class UpstreamError(AppException):
    """Raised when Google Sheets or the email provider fails."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502, code="UPSTREAM_FAILURE")

class PartialFailureError(AppException):
    """Raised when a multi-step write fails after its first write landed."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="PARTIAL_FAILURE")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        body = _error_body(exc.code, exc.message)
        if isinstance(exc, InvalidStateError):
            body["error"]["reason"] = exc.reason
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
