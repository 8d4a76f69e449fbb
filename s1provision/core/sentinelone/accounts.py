"""SentinelOne account provisioning operations."""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from s1provision.core.validators import resolve_expiration
from s1provision.errors import ExpirationParseError

from .client import SentinelOneClient
from .exceptions import (
    ExpiredAccountError,
    ReactivationFailedError,
    ResponseDecodeError,
    UnexpectedAccountStateError,
)
from .models import Account, AccountProvisioningRequest
from .transform import account_from_api, first_or_none, format_timestamp

logger = logging.getLogger(__name__)

# Platform settings applied to every new account.
DEFAULT_ACCOUNT_SETTINGS = [
    {"groupName": "dv_retention", "setting": "30 Days"},
    {"groupName": "malicious_data_retention", "setting": "365 Days"},
    {"groupName": "remote_shell_availability", "setting": "Enabled"},
    {"groupName": "marketplace_access_status", "setting": "Available"},
    {"groupName": "account_level_ranger", "setting": "Account"},
]
TOTAL_AGENTS_SURFACE = "Total Agents"


class AccountService:
    """Service for finding, creating and reactivating SentinelOne accounts."""

    def __init__(self, client: SentinelOneClient, clock: Optional[Callable[[], datetime]] = None):
        """Initialize account service.

        Args:
            client: SentinelOne API client
            clock: Returns the current time; used to resolve relative expirations
        """
        self.client = client
        self._clock = clock

    def find_account(self, name: str) -> Optional[Account]:
        """Return the account with the given name.

        Account names are unique across the platform so at most one account
        is requested.

        Args:
            name: Exact account name

        Returns:
            Account or None if not found
        """
        logger.debug(f"account_name={name} searching for account")
        resp = self.client.get("/accounts", params={"name": name, "limit": "1"})
        obj = self._decode(first_or_none, resp.data, "account", context=f"account_name={name}")
        if obj is None:
            return None
        return self._decode(account_from_api, obj, context=f"account_name={name}")

    def create_account(self, req: AccountProvisioningRequest) -> Account:
        """Create an account unless it already exists.

        - missing: the account is created
        - active: the existing account is returned unchanged
        - expired: reactivated when ``req.reactivate_account`` is set, otherwise rejected
        - any other state: rejected

        Args:
            req: Desired account state

        Returns:
            The created, adopted or reactivated account

        Raises:
            ExpirationParseError: ``req.expires`` cannot be parsed
            ExpiredAccountError: Account expired and reactivation not requested
            UnexpectedAccountStateError: Account in an unrecognized state
            SentinelOneRequestError: An API call failed
        """
        context = f"account_name={req.account_name}"
        now = self._clock() if self._clock else None
        try:
            expires = resolve_expiration(req.expires, now)
        except ExpirationParseError as exc:
            logger.error(f"{context} expiration_date={req.expires} {exc}")
            raise

        account = self.find_account(req.account_name)
        if account is not None:
            return self._adopt_existing(account, req, expires)

        logger.info(f"{context} creating new account")
        resp = self.client.post("/accounts", json=self._create_payload(req, expires))
        return self._decode(account_from_api, resp.data, context=context)

    def reactivate_account(self, account_id: str, expires: datetime) -> None:
        """Reactivate an expired account until the given expiration.

        Raises:
            ReactivationFailedError: Platform did not report success
        """
        logger.info(f"account_id={account_id} reactivating account")
        resp = self.client.put(
            f"/accounts/{account_id}/reactivate",
            json={"data": {"unlimited": False, "expiration": format_timestamp(expires)}},
        )
        data = resp.data if isinstance(resp.data, dict) else {}
        if not data.get("success"):
            error = ReactivationFailedError("failed to reactivate account : activation was not successful")
            logger.error(f"account_id={account_id} {error}")
            raise error

    def _adopt_existing(self, account: Account, req: AccountProvisioningRequest, expires: datetime) -> Account:
        context = f"account_name={req.account_name} account_id={account.id}"
        if account.is_active:
            logger.info(f"{context} expires={format_timestamp(account.expiration)} found existing active account")
            return account

        if account.is_expired:
            if not req.reactivate_account:
                error = ExpiredAccountError(req.account_name)
                logger.error(f"{context} {error}")
                raise error
            self.reactivate_account(account.id, expires)
            refreshed = self.find_account(req.account_name)
            if refreshed is None or refreshed.id != account.id:
                error = ReactivationFailedError(f"account '{req.account_name}' not found after reactivation")
                logger.error(f"{context} {error}")
                raise error
            return refreshed

        error = UnexpectedAccountStateError(req.account_name, account.state)
        logger.error(f"{context} state={account.state} {error}")
        raise error

    @staticmethod
    def _create_payload(req: AccountProvisioningRequest, expires: datetime) -> Dict[str, Any]:
        return {
            "data": {
                "name": req.account_name,
                "accountType": req.account_type,
                "billingMode": "subscription",
                "expiration": format_timestamp(expires),
                "externalId": req.external_id,
                "inherits": True,
                "licenses": {
                    "bundles": [
                        {
                            "name": req.bundle,
                            "surfaces": [{"count": req.total_agents, "name": TOTAL_AGENTS_SURFACE}],
                        }
                    ],
                    "modules": [{"name": module} for module in req.modules],
                    "settings": [dict(setting) for setting in DEFAULT_ACCOUNT_SETTINGS],
                },
                "unlimitedExpiration": False,
                "usageType": "customer",
            }
        }

    @staticmethod
    def _decode(fn, *args, context: str = ""):
        try:
            return fn(*args)
        except ResponseDecodeError as exc:
            logger.error(f"{context} failed to unmarshal response from server: {exc}")
            raise
