"""
Domain exceptions.

Storage and service code raise these; the API layer maps each class to an
HTTP status in ``planvault.api.errors``.
"""

from typing import Any, Dict, Optional


class ApplicationException(Exception):
    """Base exception for all application-specific exceptions."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DatabaseException(ApplicationException):
    """Raised when the backing store fails unexpectedly."""
    pass


class ValidationException(ApplicationException):
    """Raised for input that passed schema validation but is still unusable."""
    pass


class DuplicateException(ApplicationException):
    """Raised when creating a resource would violate a uniqueness rule."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} already exists with {field}: {value}"
        super().__init__(message, {"resource": resource, "field": field, "value": value})
