# vermietertools/core/exceptions.py
"""
Core Exceptions - standardized error handling for the Vermietertools API.

Every exception carries an HTTP-equivalent status code, a machine-checkable
error code and a public message. Server-side failures (5xx) never expose
their internal message to the client; it is only logged.
"""

from typing import Optional, Dict, Any


INTERNAL_ERROR_MESSAGE = "Interner Serverfehler"


class VermieterError(Exception):
    """Base exception for all Vermietertools errors"""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details (logged, never returned)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def public_message(self) -> str:
        """Message that may be shown to the client."""
        if self.status_code >= 500:
            return INTERNAL_ERROR_MESSAGE
        return self.message

    def to_response_body(self) -> Dict[str, str]:
        return {"error": self.public_message, "code": self.error_code}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(VermieterError):
    """Missing or malformed input. Never reaches storage."""

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.field = field

        if field:
            self.details['field'] = field


class InvalidInputError(ValidationError):
    """Input a primitive cannot operate on (e.g. an empty password to hash)"""

    error_code = "invalid_input"


class AuthenticationError(VermieterError):
    """
    Bad credentials on login.

    The message is deliberately identical for unknown email and wrong
    password so the response cannot be used for account enumeration.
    """

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Ungültige E-Mail oder Passwort"):
        super().__init__(message)


class UnauthenticatedError(VermieterError):
    """No or invalid session on a protected resource"""

    status_code = 401
    error_code = "unauthenticated"

    def __init__(self, message: str = "Nicht angemeldet"):
        super().__init__(message)


class ConflictError(VermieterError):
    """A unique value (e.g. the email of a user) already exists"""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.field = field

        if field:
            self.details['field'] = field


class StorageError(VermieterError):
    """The persistence layer is unreachable or failed"""

    error_code = "storage_error"

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize storage error.

        Args:
            message: Error description
            service_name: Name of the failing store
            operation: Operation that failed
            details: Additional context
        """
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation

        if service_name:
            self.details['service'] = service_name
        if operation:
            self.details['operation'] = operation


class ConfigurationError(VermieterError):
    """Errors in system configuration and initialization"""

    error_code = "configuration_error"

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


class UnexpectedError(VermieterError):
    """Anything uncaught, wrapped for a uniform response shape"""

    error_code = "internal_error"


# Convenience functions for creating common errors

def validation_error(message: str, field: str) -> ValidationError:
    """Create a validation error with field context."""
    return ValidationError(message, field=field)


def storage_error(message: str, service: str, operation: str = None) -> StorageError:
    """Create a storage error with service context."""
    return StorageError(message, service_name=service, operation=operation)


def config_error(message: str, component: str) -> ConfigurationError:
    """Create a configuration error with component context."""
    return ConfigurationError(message, component=component)
