"""Domain objects for SentinelOne accounts, users and roles.

Wire representations (camelCase JSON) are converted to and from these objects
in ``transform.py``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

ACCOUNT_STATE_ACTIVE = "active"
ACCOUNT_STATE_EXPIRED = "expired"


@dataclass
class APIErrorDetail:
    """Single error entry from a response envelope."""
    code: int
    title: str
    detail: str = ""


@dataclass
class Pagination:
    """Paging metadata from a response envelope."""
    next_cursor: Optional[str] = None
    total_items: int = 0


@dataclass
class APIResponse:
    """Common response envelope returned by every API call.

    ``data`` is left undecoded; each service converts it to its own resource.
    """
    errors: List[APIErrorDetail] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    data: Any = None


@dataclass
class Account:
    id: str
    name: str
    account_type: str
    billing_mode: str
    expiration: datetime
    external_id: str
    state: str

    @property
    def is_active(self) -> bool:
        return self.state == ACCOUNT_STATE_ACTIVE

    @property
    def is_expired(self) -> bool:
        return self.state == ACCOUNT_STATE_EXPIRED


@dataclass
class AccountProvisioningRequest:
    """Desired state of a tenant account.

    ``expires`` is either a duration relative to now (``"720h"``) or an
    RFC 3339 timestamp (``"2025-12-31T00:00:00Z"``).
    """
    account_name: str
    account_type: str
    expires: str
    external_id: str = ""
    reactivate_account: bool = False
    bundle: str = ""
    total_agents: int = 0
    modules: List[str] = field(default_factory=list)


@dataclass
class Role:
    id: str
    name: str
    account_name: str = ""
    predefined_role: bool = False
    scope: str = ""
    scope_id: str = ""
    users_in_role: int = 0


@dataclass
class ScopeRole:
    """Binding of a user to a role within one account scope."""
    scope_id: str
    role_id: str = ""
    role_name: str = ""


@dataclass
class User:
    id: str
    email_address: str
    email_verified: bool = False
    two_factor_status: str = ""
    scope: str = ""
    scope_roles: List[ScopeRole] = field(default_factory=list)

    def has_scope(self, scope_id: str) -> bool:
        """Return True when the user already holds a role in the given scope."""
        return any(role.scope_id == scope_id for role in self.scope_roles)


@dataclass
class UserProvisioningRequest:
    first_name: str
    last_name: str
    email_address: str
    role: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
