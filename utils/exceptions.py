"""
Custom Exception Classes for Snapgram

This module defines custom exceptions for better error handling and
categorization of failures across the application. Every backend wrapper
raises one of these instead of returning None on failure.
"""


class SnapgramError(Exception):
    """Base exception for all Snapgram application errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(SnapgramError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Backend Transport Errors
# =============================================================================

class BackendError(SnapgramError):
    """Raised by the HTTP transport when the backend rejects or fails a request.

    Service wrappers translate this into AuthError or StoreError subclasses.

    Attributes:
        code: HTTP status code, or None for network failures.
        error_type: Backend error type string, when the backend supplied one.
    """

    def __init__(self, message: str, code=None, error_type: str = ''):
        super().__init__(message)
        self.code = code
        self.error_type = error_type


# =============================================================================
# Identity Errors
# =============================================================================

class AuthError(SnapgramError):
    """Base exception for identity and session errors."""
    pass


class NotAuthenticatedError(AuthError):
    """Raised when there is no active session for the current request."""
    pass


class InvalidCredentialsError(AuthError):
    """Raised when an email/password pair is rejected."""
    pass


# =============================================================================
# Store Errors
# =============================================================================

class StoreError(SnapgramError):
    """Base exception for document and object store errors."""
    pass


class DocumentStoreError(StoreError):
    """Raised when a document store request fails."""
    pass


class ObjectStoreError(StoreError):
    """Raised when an object store request fails."""
    pass


class NotFoundError(StoreError):
    """Raised when a document or file does not exist."""
    pass


class PostCreationError(StoreError):
    """Raised when publishing a post fails.

    The triggering exception is chained as ``__cause__``; callers get a
    single failure type regardless of which step went wrong.
    """
    pass


class PostUpdateError(StoreError):
    """Raised when editing a post fails. The post is left as it was."""
    pass
