# src/marketplace/services/exceptions.py

from typing import Any, Dict, List, Optional
from pydantic import ValidationError


class ServiceException(Exception):
    """Base exception for all service layer errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ServiceException):
    """Raised when a referenced product or user does not exist."""
    pass


class UserNotFound(NotFoundError):
    """Raised when a user is not found in the database."""
    pass


class EmailAlreadyExistsError(ServiceException):
    """Raised when trying to register (or switch to) an email that already exists."""
    pass


class InvalidCredentialsError(ServiceException):
    """Raised during login if credentials are invalid."""
    pass


class AuthenticationError(ServiceException):
    """Raised when a bearer token is missing, malformed, expired or points to an unknown user."""
    pass


class PermissionDeniedError(ServiceException):
    """Raised when the caller does not own the resource it tries to mutate."""
    pass


class ValidationFailure(ServiceException):
    """Raised when input fields are invalid. Carries field-level detail."""
    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: ValidationError, message: str = "Invalid input.") -> "ValidationFailure":
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return cls(message, errors)


class AssetStorageError(ServiceException):
    """Raised when an uploaded payload cannot be written to storage."""
    pass
