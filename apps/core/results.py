"""
Service result contract shared by every app.

Service functions never raise to their caller. They return a ServiceResult
(or a subclass carrying a domain field) whose ``success``/``message`` pair
describes the outcome and whose ``error`` names the failure kind.

Usage:
    from apps.core.results import ServiceResult, ErrorKind, service_boundary

    @service_boundary(ServiceResult, "A server error occurred during withdrawal.")
    def withdraw(...) -> ServiceResult:
        if not found:
            return ServiceResult.failure("Application record not found.", ErrorKind.NOT_FOUND)
        return ServiceResult.ok("Withdrawn.")
"""
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional, Type

from ninja.errors import HttpError

logger = logging.getLogger(__name__)


class ErrorKind:
    """Failure categories carried in ServiceResult.error."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    SERVER_ERROR = "SERVER_ERROR"


# HTTP status used by the API routers for each failure kind
HTTP_STATUS_BY_ERROR = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.SERVER_ERROR: 500,
}


@dataclass(frozen=True)
class ServiceResult:
    """Outcome of a service operation."""
    success: bool
    message: str
    error: Optional[str] = None

    @classmethod
    def ok(cls, message: str, **data):
        return cls(success=True, message=message, **data)

    @classmethod
    def failure(cls, message: str, error: str = ErrorKind.VALIDATION):
        return cls(success=False, message=message, error=error)


def service_boundary(result_cls: Type[ServiceResult], message: str) -> Callable:
    """
    Decorator for the outer boundary of a service operation.

    Any exception that escapes the wrapped function is logged with its
    traceback and mapped to ``result_cls.failure(message, SERVER_ERROR)``.
    Details of the error are never returned to the caller.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception(f"Unhandled error in {func.__module__}.{func.__name__}")
                return result_cls.failure(message, ErrorKind.SERVER_ERROR)
        return wrapper
    return decorator


def raise_for_result(result: ServiceResult) -> ServiceResult:
    """
    Raise an HttpError for a failed result, return it unchanged otherwise.
    Used by the API routers.
    """
    if not result.success:
        status = HTTP_STATUS_BY_ERROR.get(result.error, 400)
        raise HttpError(status, result.message)
    return result
