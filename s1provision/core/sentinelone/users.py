"""SentinelOne user provisioning operations."""
from __future__ import annotations
import logging
import secrets
import string
from typing import List, Optional

from .client import SentinelOneClient
from .exceptions import PasswordResetError, ResponseDecodeError, RoleNotFoundError
from .models import ScopeRole, User, UserProvisioningRequest
from .roles import ADMIN_ROLE, RoleService
from .transform import first_or_none, scope_role_to_api, user_from_api

PASSWORD_LENGTH = 32
PASSWORD_ALPHABET = string.ascii_letters + string.digits
USER_SCOPE = "account"

logger = logging.getLogger(__name__)


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Return a random alphanumeric password.

    The password is only used to satisfy the create-user call; users set
    their own through the password reset flow.
    """
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class UserService:
    """Service for managing SentinelOne console users."""

    def __init__(self, client: SentinelOneClient, role_service: Optional[RoleService] = None):
        """Initialize user service.

        Args:
            client: SentinelOne API client
            role_service: Role lookup (defaults to one built on ``client``)
        """
        self.client = client
        self.roles = role_service or RoleService(client)

    def find_user(self, email: str) -> Optional[User]:
        """Return the user that exactly matches the email address.

        Args:
            email: Email address to search for

        Returns:
            User or None if not found
        """
        logger.debug(f"email_address={email} searching for user")
        resp = self.client.get("/users", params={"email": email, "limit": "1"})
        try:
            obj = first_or_none(resp.data, "user")
            return user_from_api(obj) if obj is not None else None
        except ResponseDecodeError as exc:
            logger.error(f"email_address={email} failed to unmarshal response from server: {exc}")
            raise

    def create_user(self, req: UserProvisioningRequest, account_id: str) -> User:
        """Create a user for the account, or grant an existing user access to it.

        An existing user that already holds a role in the account is returned
        unchanged. An existing user without one is granted the Admin role of
        the account. A new user is created with the requested role.

        Args:
            req: Desired user
            account_id: Account the user administers

        Returns:
            The created or updated user

        Raises:
            RoleNotFoundError: Admin role missing while updating an existing user
            SentinelOneRequestError: An API call failed
        """
        context = f"email_address={req.email_address}"
        user = self.find_user(req.email_address)
        admin_role = self.roles.find_role(account_id, ADMIN_ROLE)

        if user is not None:
            if user.has_scope(account_id):
                logger.info(f"{context} user_id={user.id} found existing user")
                return user

            if admin_role is None:
                error = RoleNotFoundError(f"role '{ADMIN_ROLE}' not found in account '{account_id}'")
                logger.error(f"{context} account_id={account_id} {error}")
                raise error

            logger.info(f"{context} user_id={user.id} account_id={account_id} adding existing user to account")
            scope_roles = user.scope_roles + [
                ScopeRole(scope_id=account_id, role_id=admin_role.id, role_name=admin_role.name)
            ]
            return self.update_user_scope_roles(user.id, scope_roles)

        logger.info(f"{context} creating new user")
        body = {
            "data": {
                "email": req.email_address,
                "password": generate_password(),
                "fullName": req.full_name,
                "scope": USER_SCOPE,
                "scopeRoles": [{"id": account_id, "roleName": req.role}],
                "twoFaEnabled": True,
            }
        }
        resp = self.client.post("/users", json=body)
        try:
            return user_from_api(resp.data)
        except ResponseDecodeError as exc:
            logger.error(f"{context} failed to unmarshal response from server: {exc}")
            raise

    def update_user_scope_roles(self, user_id: str, scope_roles: List[ScopeRole]) -> User:
        """Replace the full scope-role list of a user.

        Args:
            user_id: User ID
            scope_roles: Complete list of scope roles the user should hold

        Returns:
            The updated user
        """
        logger.debug(f"user_id={user_id} updating scope roles for user")
        resp = self.client.put(
            f"/users/{user_id}",
            json={
                "data": {
                    "scope": USER_SCOPE,
                    "scopeRoles": [scope_role_to_api(role) for role in scope_roles],
                }
            },
        )
        try:
            return user_from_api(resp.data)
        except ResponseDecodeError as exc:
            logger.error(f"user_id={user_id} failed to unmarshal response from server: {exc}")
            raise

    def reset_user_password(self, user_id: str) -> None:
        """Send a password reset email to the user.

        Raises:
            PasswordResetError: The platform did not affect any user
            ResponseDecodeError: The result count is not an integer
        """
        logger.info(f"user_id={user_id} resetting user password")
        resp = self.client.post(
            "/users/login/send-reset-password-email",
            json={"filter": {"ids": [user_id]}},
        )
        data = resp.data if isinstance(resp.data, dict) else {}
        try:
            affected = int(data.get("affected") or 0)
        except (TypeError, ValueError):
            error = ResponseDecodeError("failed to decode password reset result: 'affected' is not an integer")
            logger.error(f"user_id={user_id} failed to unmarshal response from server: {error}")
            raise error from None
        if affected == 0:
            error = PasswordResetError("failed to reset password for user : user ID was not found")
            logger.error(f"user_id={user_id} {error}")
            raise error
