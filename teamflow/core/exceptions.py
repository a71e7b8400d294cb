from typing import Optional
from fastapi import HTTPException, status


class ApiError(HTTPException):
    """
    HTTP error raised by the service layer.

    Each constructor maps one error kind (bad request, unauthorized,
    forbidden, not found, conflict) onto its status code. The exception
    handlers in main.py render it into the standard error envelope.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[list] = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.errors = errors

    @property
    def message(self) -> str:
        return self.detail

    @classmethod
    def bad_request(cls, message: str, errors: Optional[list] = None) -> "ApiError":
        return cls(status.HTTP_400_BAD_REQUEST, message, errors=errors)

    @classmethod
    def unauthorized(cls, message: str) -> "ApiError":
        return cls(
            status.HTTP_401_UNAUTHORIZED,
            message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @classmethod
    def forbidden(cls, message: str) -> "ApiError":
        return cls(status.HTTP_403_FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: str) -> "ApiError":
        return cls(status.HTTP_404_NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> "ApiError":
        return cls(status.HTTP_409_CONFLICT, message)

    @classmethod
    def too_many_requests(cls, message: str) -> "ApiError":
        return cls(status.HTTP_429_TOO_MANY_REQUESTS, message)


class TenantScopeError(RuntimeError):
    """Raised when a tenant-scoped table is read without an organization filter."""

    def __init__(self, entity: str):
        super().__init__(f"Query on {entity} without organization_id filter")
        self.entity = entity
