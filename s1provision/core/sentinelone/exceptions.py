"""SentinelOne-specific exceptions for error handling."""
from __future__ import annotations
from typing import Optional

from s1provision.errors import EXIT_CLIENT_ERROR, EXIT_CLIENT_REQUEST_ERROR, ProvisionerError


class SentinelOneError(ProvisionerError):
    """Base exception for all SentinelOne operations."""

    exit_code = EXIT_CLIENT_ERROR


class SentinelOneRequestError(SentinelOneError):
    """A call to the SentinelOne API failed.

    Attributes:
        method: HTTP method of the failed call
        url: Full URL of the failed call
        message: Short description of what failed
        reason: Underlying cause
    """

    exit_code = EXIT_CLIENT_REQUEST_ERROR

    def __init__(self, method: str, url: str, message: str, reason: str):
        self.method = method
        self.url = url
        self.message = message
        self.reason = reason
        super().__init__(f"{method} {url} | {message} : {reason}")


class TransportError(SentinelOneRequestError):
    """Network or I/O error while issuing the request."""
    pass


class ServerFaultError(SentinelOneRequestError):
    """Server error (>= 500) or operation not permitted (>= 405).

    Attributes:
        status_code: HTTP status code returned by the server
    """

    def __init__(self, method: str, url: str, status_code: int, reason: str):
        self.status_code = status_code
        super().__init__(method, url, "failed to execute request", reason)


class APIReportedError(SentinelOneRequestError):
    """The response envelope carried one or more platform errors.

    Attributes:
        error_count: Number of errors reported by the platform
    """

    def __init__(self, method: str, url: str, error_count: int):
        self.error_count = error_count
        super().__init__(
            method,
            url,
            "server returned one or more API errors",
            "server returned one or more API errors",
        )


class ResponseDecodeError(SentinelOneError):
    """Response envelope or resource body does not have the expected shape.

    Attributes:
        method: HTTP method when the failure is tied to a request
        url: URL when the failure is tied to a request
    """

    exit_code = EXIT_CLIENT_REQUEST_ERROR

    def __init__(self, message: str, method: Optional[str] = None, url: Optional[str] = None):
        self.method = method
        self.url = url
        if method and url:
            message = f"{method} {url} | {message}"
        super().__init__(message)


class AccountStateError(SentinelOneError):
    """Account exists but its state forbids the requested operation.

    Attributes:
        account_name: Name of the conflicting account
        state: Lifecycle state reported by the platform
    """

    def __init__(self, account_name: str, state: str, message: str):
        self.account_name = account_name
        self.state = state
        super().__init__(f"{message} : account already exists")


class ExpiredAccountError(AccountStateError):
    """Account is expired and reactivation was not requested."""

    def __init__(self, account_name: str):
        super().__init__(
            account_name,
            "expired",
            "failed to create account because it is expired and not set to be reactivated",
        )


class UnexpectedAccountStateError(AccountStateError):
    """Account is in a state that is neither active nor expired."""

    def __init__(self, account_name: str, state: str):
        super().__init__(
            account_name,
            state,
            f"failed to create account because it exists and is currently '{state}'",
        )


class ReactivationFailedError(SentinelOneError):
    """Platform did not report a successful account reactivation."""
    pass


class PasswordResetError(SentinelOneError):
    """Platform did not send a password reset to any user."""
    pass


class RoleNotFoundError(SentinelOneError):
    """Role does not exist in the account scope."""
    pass
