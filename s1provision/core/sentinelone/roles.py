"""SentinelOne role lookup operations."""
from __future__ import annotations
import logging
from typing import Optional

from .client import SentinelOneClient
from .exceptions import ResponseDecodeError
from .models import Role
from .transform import first_or_none, role_from_api

ADMIN_ROLE = "Admin"

logger = logging.getLogger(__name__)


class RoleService:
    """Service for looking up SentinelOne RBAC roles.

    Roles are never created or modified by this tool.
    """

    def __init__(self, client: SentinelOneClient):
        """Initialize role service.

        Args:
            client: SentinelOne API client
        """
        self.client = client

    def find_role(self, account_id: str, name: str) -> Optional[Role]:
        """Return the role with the given name in an account scope.

        Role names are unique per account so at most one role is requested.

        Args:
            account_id: Account scope to search
            name: Exact role name (e.g., "Admin")

        Returns:
            Role or None if not found
        """
        logger.debug(f"account_id={account_id} role={name} searching for role in account")
        resp = self.client.get(
            "/rbac/roles",
            params={"accountIds": account_id, "name": name, "limit": "1"},
        )
        try:
            obj = first_or_none(resp.data, "role")
            return role_from_api(obj) if obj is not None else None
        except ResponseDecodeError as exc:
            logger.error(f"account_id={account_id} role={name} failed to unmarshal response from server: {exc}")
            raise
