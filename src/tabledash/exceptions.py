"""
Tabledash - Custom Exceptions.

Centralized exception handling with standardized error responses.
"""

from typing import Any
from uuid import UUID


class TabledashException(Exception):
    """Base exception for Tabledash application."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        request_id: UUID | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(message)


class UnauthorizedException(TabledashException):
    """Raised when a credential is missing, anonymous, or rejected."""

    def __init__(self, message: str = "Missing Secret Key"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class AnonymousKeyException(UnauthorizedException):
    """Raised when the publishable key is presented for an admin operation."""

    def __init__(self):
        super().__init__("The anonymous key cannot be used for administration")


class NotFoundException(TabledashException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str | UUID):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource_type} not found: {resource_id}",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class ValidationException(TabledashException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class MethodNotAllowedException(TabledashException):
    """Raised when an endpoint does not support the request method."""

    def __init__(self, method: str):
        super().__init__(
            code="METHOD_NOT_ALLOWED",
            message="Method Not Allowed",
            status_code=405,
            details={"method": method},
        )


class ConfigurationException(TabledashException):
    """Raised when a required setting is missing."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            status_code=500,
            details={"setting": setting} if setting else None,
        )


class DatabaseException(TabledashException):
    """Raised when the hosted database rejects or fails a query."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="DATABASE_ERROR",
            message=message,
            status_code=500,
            details=details,
        )


class UpstreamServiceException(TabledashException):
    """Raised when a proxied upstream service fails."""

    def __init__(self, service_name: str, message: str):
        super().__init__(
            code="UPSTREAM_SERVICE_ERROR",
            message=f"{service_name} error: {message}",
            status_code=502,
            details={"service": service_name},
        )
