from .base import (
    AppException,
    ValidationError,
    AuthenticationRequiredError,
    PermissionDeniedError,
    NotFoundError,
    ConflictError,
)
from .handlers import app_exception_handler, request_validation_handler, general_exception_handler

__all__ = [
    "AppException",
    "ValidationError",
    "AuthenticationRequiredError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "app_exception_handler",
    "request_validation_handler",
    "general_exception_handler"
]
