"""
Error types carrying a machine-readable code alongside the HTTP status.

The front end branches on `code` (toast vs. redirect to login vs. billing
message), so anything it must distinguish is raised as an ApiError rather
than a bare HTTPException.
"""

from fastapi import HTTPException, status


MISSING_FIELD = "MISSING_FIELD"
INVALID_OPERATION = "INVALID_OPERATION"
TABLE_NOT_ALLOWED = "TABLE_NOT_ALLOWED"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
UPSTREAM_ERROR = "UPSTREAM_ERROR"
PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
INVALID_ONBOARDING_STATE = "INVALID_ONBOARDING_STATE"


class ApiError(HTTPException):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(status_code=status_code, detail=message)
        self.code = code


def missing_field(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, MISSING_FIELD, message)


def unauthorized(message: str = "Invalid or expired token") -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED, message)


def forbidden(message: str = "Forbidden") -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, FORBIDDEN, message)


def not_found(message: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND, message)
