"""SentinelOne management API client library.

Architecture:
- client.py: HTTP client, response envelope and failure classification
- models.py: Domain objects (accounts, users, roles)
- transform.py: Wire format ↔ domain object conversions
- accounts.py: Account find / create / reactivate
- users.py: User find / create / scope roles / password reset
- roles.py: Role lookup
- exceptions.py: Typed exceptions for error handling

Usage:
    from s1provision.core.sentinelone import SentinelOneClient, AccountService

    client = SentinelOneClient("https://tenant.sentinelone.net", api_key)
    account = AccountService(client).create_account(request)
"""
from .client import SentinelOneClient, API_BASE_PATH, REQUEST_TIMEOUT
from .exceptions import (
    SentinelOneError,
    SentinelOneRequestError,
    TransportError,
    ServerFaultError,
    APIReportedError,
    ResponseDecodeError,
    AccountStateError,
    ExpiredAccountError,
    UnexpectedAccountStateError,
    ReactivationFailedError,
    PasswordResetError,
    RoleNotFoundError,
)
from .models import (
    APIErrorDetail,
    APIResponse,
    Pagination,
    Account,
    AccountProvisioningRequest,
    Role,
    ScopeRole,
    User,
    UserProvisioningRequest,
)
from .accounts import AccountService
from .roles import RoleService, ADMIN_ROLE
from .users import UserService, generate_password

__all__ = [
    # Client
    "SentinelOneClient",
    "API_BASE_PATH",
    "REQUEST_TIMEOUT",

    # Exceptions
    "SentinelOneError",
    "SentinelOneRequestError",
    "TransportError",
    "ServerFaultError",
    "APIReportedError",
    "ResponseDecodeError",
    "AccountStateError",
    "ExpiredAccountError",
    "UnexpectedAccountStateError",
    "ReactivationFailedError",
    "PasswordResetError",
    "RoleNotFoundError",

    # Models
    "APIErrorDetail",
    "APIResponse",
    "Pagination",
    "Account",
    "AccountProvisioningRequest",
    "Role",
    "ScopeRole",
    "User",
    "UserProvisioningRequest",

    # Services
    "AccountService",
    "RoleService",
    "UserService",
    "ADMIN_ROLE",
    "generate_password",
]
