"""
Custom exceptions for the application.

Every error carries a short machine-readable ``code`` that the RPC layer
reports next to the human-readable message.
"""

from typing import Any, Optional


class ChatAppError(Exception):
    """Base exception for the chat backend."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class AuthenticationError(ChatAppError):
    """No verified identity for the request."""

    code = "UNAUTHORIZED"


class AuthorizationError(ChatAppError):
    """Authorization failed."""

    code = "FORBIDDEN"


class ForbiddenError(AuthorizationError):
    """Caller does not own the addressed resource."""

    pass


class NotFoundError(ChatAppError):
    """Resource not found."""

    code = "NOT_FOUND"


class ValidationError(ChatAppError):
    """Input failed shape or length checks."""

    code = "VALIDATION_ERROR"


class UnknownProcedureError(ChatAppError):
    """Requested procedure does not exist."""

    code = "METHOD_NOT_FOUND"


class DependencyFailureError(ChatAppError):
    """Persistence or completion-service failure."""

    code = "DEPENDENCY_FAILURE"


class CompletionError(DependencyFailureError):
    """Completion provider could not be configured or reached."""

    pass
