"""SentinelOne wire format ↔ domain object transformations.

The API speaks flat camelCase JSON with RFC 3339 timestamp strings; the rest
of the code base works with the dataclasses in ``models.py``.

Usage:
    account = account_from_api({"id": "123", "name": "Acme", ...})
    payload = [scope_role_to_api(role) for role in user.scope_roles]
"""
from __future__ import annotations
from typing import Any, Dict, Optional

from s1provision.core.timestamps import format_timestamp, parse_timestamp

from .exceptions import ResponseDecodeError
from .models import Account, Role, ScopeRole, User

__all__ = [
    "account_from_api",
    "role_from_api",
    "user_from_api",
    "scope_role_from_api",
    "scope_role_to_api",
    "first_or_none",
    "format_timestamp",
    "parse_timestamp",
]


def _require(obj: Any, key: str, kind: str) -> Any:
    if not isinstance(obj, dict):
        raise ResponseDecodeError(f"failed to decode {kind} object: expected a JSON object")
    if key not in obj or obj[key] is None:
        raise ResponseDecodeError(f"failed to decode {kind} object: missing '{key}'")
    return obj[key]


def _to_int(value: Any, kind: str, key: str) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        raise ResponseDecodeError(f"failed to decode {kind} object: '{key}' is not an integer") from None


def account_from_api(obj: Dict[str, Any]) -> Account:
    """Convert an account object returned by the API to an Account.

    Raises:
        ResponseDecodeError: If required fields are missing or the expiration
            cannot be parsed
    """
    account_id = _require(obj, "id", "account")
    raw_expiration = _require(obj, "expiration", "account")
    try:
        expiration = parse_timestamp(raw_expiration)
    except ValueError as exc:
        raise ResponseDecodeError(f"failed to parse account expiration date: {exc}") from exc
    return Account(
        id=str(account_id),
        name=obj.get("name") or "",
        account_type=obj.get("accountType") or "",
        billing_mode=obj.get("billingMode") or "",
        expiration=expiration,
        external_id=obj.get("externalId") or "",
        state=obj.get("state") or "",
    )


def role_from_api(obj: Dict[str, Any]) -> Role:
    """Convert a role object returned by the API to a Role."""
    role_id = _require(obj, "id", "role")
    return Role(
        id=str(role_id),
        name=obj.get("name") or "",
        account_name=obj.get("accountName") or "",
        predefined_role=bool(obj.get("predefinedRole", False)),
        scope=obj.get("scope") or "",
        scope_id=obj.get("scopeId") or "",
        users_in_role=_to_int(obj.get("usersInRoles"), "role", "usersInRoles"),
    )


def scope_role_from_api(obj: Dict[str, Any]) -> ScopeRole:
    scope_id = _require(obj, "id", "scope role")
    return ScopeRole(
        scope_id=str(scope_id),
        role_id=obj.get("roleId") or "",
        role_name=obj.get("roleName") or "",
    )


def scope_role_to_api(role: ScopeRole) -> Dict[str, str]:
    return {"id": role.scope_id, "roleId": role.role_id, "roleName": role.role_name}


def user_from_api(obj: Dict[str, Any]) -> User:
    """Convert a user object returned by the API to a User."""
    user_id = _require(obj, "id", "user")
    raw_roles = obj.get("scopeRoles") or []
    if not isinstance(raw_roles, list):
        raise ResponseDecodeError("failed to decode user object: 'scopeRoles' is not a list")
    return User(
        id=str(user_id),
        email_address=obj.get("email") or "",
        email_verified=bool(obj.get("emailVerified", False)),
        two_factor_status=obj.get("twoFaStatus") or "",
        scope=obj.get("scope") or "",
        scope_roles=[scope_role_from_api(role) for role in raw_roles],
    )


def first_or_none(data: Any, kind: str) -> Optional[Dict[str, Any]]:
    """Return the first object of a search result list, or None when empty.

    Raises:
        ResponseDecodeError: If ``data`` is not a list
    """
    if data is None:
        return None
    if not isinstance(data, list):
        raise ResponseDecodeError(f"failed to decode {kind} search results: expected a JSON array")
    return data[0] if data else None
