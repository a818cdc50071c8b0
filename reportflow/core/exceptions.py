# reportflow/core/exceptions.py
"""
Core exceptions for the ReportFlow validation API.

The validation store itself never raises; these exceptions are used by the
services and the HTTP layer on top of it so every failure carries a message
plus a details dict that can be logged without leaking internals.
"""

from typing import Optional, Dict, Any


class ReportFlowError(Exception):
    """Base exception for all ReportFlow errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ReportFlowError):
    """Errors in request input validation"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize validation error.

        Args:
            message: Error description
            field: Field that failed validation
            value: Invalid value
            details: Additional validation context
        """
        super().__init__(message, details)
        self.field = field
        self.value = value

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)


class ServiceError(ReportFlowError):
    """Errors in service lifecycle and background work"""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation

        if service_name:
            self.details['service'] = service_name
        if operation:
            self.details['operation'] = operation


class ConfigurationError(ReportFlowError):
    """Errors in system configuration and initialization"""

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


class SessionError(ReportFlowError):
    """Errors in validation session handling (e.g. unknown session key)"""

    def __init__(
        self,
        message: str,
        session_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.session_key = session_key

        if session_key:
            self.details['session_key'] = session_key


# Convenience functions for creating common errors

def validation_error(message: str, field: str, value: Any = None) -> ValidationError:
    """Create a validation error with field context."""
    return ValidationError(message, field=field, value=value)


def service_error(message: str, service: str, operation: str = None) -> ServiceError:
    """Create a service error with service context."""
    return ServiceError(message, service_name=service, operation=operation)


def config_error(message: str, component: str) -> ConfigurationError:
    """Create a configuration error with component context."""
    return ConfigurationError(message, component=component)


def session_error(message: str, session_key: str) -> SessionError:
    """Create a session error with session context."""
    return SessionError(message, session_key=session_key)
