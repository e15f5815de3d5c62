"""
Centralized error types, user-facing messages, and the JSON error envelope.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    status_code = 500
    default_message = "Something went wrong on our end. Please try again later."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class UnauthenticatedError(AppError):
    """Missing, malformed, expired or unverifiable credential."""
    status_code = 401
    default_message = "Not authorized"


class ForbiddenError(AppError):
    """Role or ownership mismatch, or a blocked account."""
    status_code = 403
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ValidationError(AppError):
    status_code = 400
    default_message = "Please check your input and try again."


class ConflictError(AppError):
    status_code = 400
    default_message = "This record already exists."


class InvalidPathError(AppError):
    """Stored file reference escapes the trusted upload root."""
    status_code = 400
    default_message = "Invalid resume path"


class InternalError(AppError):
    status_code = 500


ERROR_MESSAGES = {
    # Authentication
    "no_token": "Not authorized, no token",
    "token_failed": "Not authorized, token failed",
    "invalid_credentials": "Invalid credentials",
    "email_exists": "User already exists",
    "account_blocked": "Account blocked",
    "access_denied": "Access denied",

    # Files
    "file_too_large": "File is too large. Maximum size is 2MB.",
    "resume_required": "Resume file is required",
    "resume_not_found": "Resume file not found",
    "upload_failed": "Could not store the uploaded file",

    # Jobs
    "job_not_found": "Job not found",
    "job_fields_required": "All fields are required",
    "job_update_forbidden": "Not authorized to update this job",
    "job_delete_forbidden": "Not authorized to delete this job",

    # Applications
    "application_not_found": "Application not found",
    "already_applied": "Already applied for this job",
    "applicants_forbidden": "Not authorized to view applicants",
    "application_update_forbidden": "Not authorized to update this application",

    # General
    "user_not_found": "User not found",
    "server_error": "Server error",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def is_unique_violation(error: IntegrityError) -> bool:
    error_str = str(getattr(error, "orig", None) or error).lower()
    return "unique" in error_str or "duplicate" in error_str


def create_error_response(status_code: int, message: str) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "status_code": status_code,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            return create_error_response(exc.status_code, get_error_message("server_error"))
        return create_error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return create_error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = first.get("msg") or get_error_message("validation_error")
        return create_error_response(400, f"{field}: {message}" if field else message)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s: %s", request.method, request.url.path, exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
        return create_error_response(500, get_error_message("server_error"))
