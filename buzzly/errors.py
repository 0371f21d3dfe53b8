from typing import Callable
import logging
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from fastapi import FastAPI, status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BuzzlyException(Exception):
    """Base class for all Buzzly API exceptions."""

    def __init__(self, message: str = "An error occurred", error_code: str = "error"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class DatabaseError(BuzzlyException):
    """An error occurred while interacting with the database."""
    def __init__(self, message: str = "Database error occurred", error_code: str = "database_error"):
        super().__init__(message=message, error_code=error_code)


class InvalidToken(BuzzlyException):
    """User has provided an invalid or expired token."""
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message=message, error_code="invalid_token")


class UnAuthenticated(BuzzlyException):
    """User is not authenticated."""
    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message=message, error_code="unauthenticated")


class InvalidCredentials(BuzzlyException):
    """User has provided incorrect login details."""
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code="invalid_credentials")


class UserAlreadyExists(BuzzlyException):
    """User is trying to register with an email or username that is taken."""
    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message=message, error_code="user_exists")


class AccountBlocked(BuzzlyException):
    """The account has been blocked by a moderator."""
    def __init__(self, message: str = "This account has been blocked"):
        super().__init__(message=message, error_code="account_blocked")


class Forbidden(BuzzlyException):
    """The client does not have permission to perform this action."""
    def __init__(self, message: str = "Forbidden", error_code: str = "forbidden"):
        super().__init__(message=message, error_code=error_code)


class InsufficientPermission(Forbidden):
    """Moderator privileges are required."""
    def __init__(self, message: str = "Access denied. Admin privileges required."):
        super().__init__(message=message, error_code="insufficient_permissions")


class NotFound(BuzzlyException):
    """The requested resource does not exist."""
    def __init__(self, message: str = "Resource not found", error_code: str = "not_found"):
        super().__init__(message=message, error_code=error_code)


class UserNotFound(NotFound):
    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, error_code="user_not_found")


class PostNotFound(NotFound):
    def __init__(self, message: str = "Post not found"):
        super().__init__(message=message, error_code="post_not_found")


class CommentNotFound(NotFound):
    def __init__(self, message: str = "Comment not found"):
        super().__init__(message=message, error_code="comment_not_found")


class ReportNotFound(NotFound):
    def __init__(self, message: str = "Report not found"):
        super().__init__(message=message, error_code="report_not_found")


class NotificationNotFound(NotFound):
    def __init__(self, message: str = "Notification not found"):
        super().__init__(message=message, error_code="notification_not_found")


class InvalidArgument(BuzzlyException):
    """Submitted data is malformed or outside an allowed set."""
    def __init__(self, message: str = "Invalid argument", error_code: str = "invalid_argument"):
        super().__init__(message=message, error_code=error_code)


class InvalidTransition(BuzzlyException):
    """The requested report status change is not allowed from the current status."""
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            message=f"Cannot move a report from '{current}' to '{requested}'",
            error_code="invalid_transition",
        )


class MediaUploadFailed(BuzzlyException):
    """The image host rejected or failed an upload."""
    def __init__(self, message: str = "Error uploading image"):
        super().__init__(message=message, error_code="media_upload_failed")


def create_exception_handler(
    status_code: int,
    initial_detail: dict
) -> Callable[[Request, BuzzlyException], JSONResponse]:

    async def exception_handler(request: Request, exc: BuzzlyException):
        return JSONResponse(
            status_code=status_code,
            content={
                "message": exc.message or initial_detail["message"],
                "error_code": exc.error_code or initial_detail["error_code"],
                "resolution": initial_detail["resolution"],
            }
        )

    return exception_handler


# Exception type -> (status, default message, resolution, default error_code).
# Subclasses without their own entry use their parent's, so NotFound covers
# every *NotFound and Forbidden covers InsufficientPermission.
ERROR_RESPONSES = {
    DatabaseError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred",
        "Please try again later", "database_error",
    ),
    UserAlreadyExists: (
        status.HTTP_400_BAD_REQUEST, "User with this email already exists",
        "Please use a different email or username", "user_exists",
    ),
    InvalidCredentials: (
        status.HTTP_400_BAD_REQUEST, "Invalid email or password",
        "Please check your credentials and try again", "invalid_credentials",
    ),
    UnAuthenticated: (
        status.HTTP_401_UNAUTHORIZED, "User not authenticated.",
        "Please request a new token or signin.", "unauthenticated",
    ),
    InvalidToken: (
        status.HTTP_401_UNAUTHORIZED, "Token is invalid or expired",
        "Please request a new token", "invalid_token",
    ),
    AccountBlocked: (
        status.HTTP_403_FORBIDDEN, "This account has been blocked",
        "Please contact a moderator", "account_blocked",
    ),
    Forbidden: (
        status.HTTP_403_FORBIDDEN, "Forbidden",
        "You do not have permission to access this resource", "forbidden",
    ),
    NotFound: (
        status.HTTP_404_NOT_FOUND, "Resource not found",
        "Please check the identifier and try again", "not_found",
    ),
    InvalidArgument: (
        status.HTTP_400_BAD_REQUEST, "Invalid argument",
        "Please check the data you provided", "invalid_argument",
    ),
    InvalidTransition: (
        status.HTTP_400_BAD_REQUEST, "Invalid status transition",
        "Reopen the report to pending before reviewing it again", "invalid_transition",
    ),
    MediaUploadFailed: (
        status.HTTP_502_BAD_GATEWAY, "Error uploading image",
        "Please try again later", "media_upload_failed",
    ),
}


def register_all_errors(app: FastAPI):
    """Registers all exception handlers in the FastAPI app."""
    for exc_class, (status_code, message, resolution, error_code) in ERROR_RESPONSES.items():
        app.add_exception_handler(
            exc_class,
            create_exception_handler(
                status_code=status_code,
                initial_detail={"message": message, "resolution": resolution, "error_code": error_code},
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error at {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            content={
                "message": "Database error occurred",
                "resolution": "Please try again later",
                "error_code": "database_error",
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
