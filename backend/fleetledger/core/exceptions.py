"""
Service-level error types.

Services raise these instead of HTTPException so that every caller (routes,
scripts, tests) can tell a bad request from a missing record or a failing
database. The API layer maps them to HTTP responses in one place
(see ``fleetledger.main``).
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 400
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(ServiceError):
    """Input rejected before touching storage (missing field, bad amount...)."""

    status_code = 422


class NotFound(ServiceError):
    """Referenced record does not exist."""

    status_code = 404


class AuthenticationFailed(ServiceError):
    """Credentials or token could not be verified."""

    status_code = 401


class PermissionDenied(ServiceError):
    """Authenticated, but the role is not allowed to do this."""

    status_code = 403


class ConcurrencyConflict(ServiceError):
    """The record changed since the client read it. Refresh and try again."""

    status_code = 409
    retryable = True


class PersistenceUnavailable(ServiceError):
    """The database could not complete the operation."""

    status_code = 503
    retryable = True
