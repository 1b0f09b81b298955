"""
Shared error types.

Raised by the domain layer (access rules, validation, uploads) and rendered by
the API as `{"error": message}` with the matching HTTP status.
"""


class IstanfixError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(IstanfixError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationFailed(IstanfixError):
    """No valid identity for the request."""

    status_code = 401


class PermissionDenied(IstanfixError):
    """Actor is known but not allowed to perform the action."""

    status_code = 403


class NotFound(IstanfixError):
    """Referenced resource does not exist."""

    status_code = 404
