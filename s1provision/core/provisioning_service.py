"""
Provisioning Service Layer: account -> user -> password reset

Architecture:
    CLI (scripts/provision.py) ──> provisioning_service.py ──> s1provision.core.sentinelone ──> SentinelOne

Each record is provisioned completely before the next one starts. A failure
stops the batch; records already provisioned are left as they are.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from s1provision.core.records import AccountRecord
from s1provision.errors import ProvisionerError
from s1provision.core.sentinelone import (
    Account,
    AccountService,
    RoleService,
    SentinelOneClient,
    User,
    UserService,
)

logger = logging.getLogger(__name__)

# Step names double as audit event types.
STEP_ACCOUNT = "account_provision"
STEP_USER = "user_provision"
STEP_PASSWORD_RESET = "password_reset"


@dataclass
class ProvisioningResult:
    """Outcome of provisioning one record."""
    record: AccountRecord
    account: Account
    user: User
    password_reset: bool = False


class ProvisioningService:
    """Provision accounts and their first administrative user."""

    def __init__(
        self,
        client: SentinelOneClient,
        accounts: Optional[AccountService] = None,
        users: Optional[UserService] = None,
    ):
        self.client = client
        self.accounts = accounts or AccountService(client)
        self.users = users or UserService(client, RoleService(client))

    def provision(
        self,
        record: AccountRecord,
        reactivate: bool = False,
        reset_password: bool = False,
    ) -> ProvisioningResult:
        """Provision the account of one record, then its user.

        Args:
            record: Account and user description
            reactivate: Reactivate the account if it exists and is expired
            reset_password: Send the user a password reset email

        Returns:
            ProvisioningResult with the resulting account and user

        Raises:
            ProvisionerError: With ``step`` naming the step that failed
        """
        step = STEP_ACCOUNT
        try:
            account = self.accounts.create_account(record.account_request(reactivate))
            logger.info(f"account_id={account.id} account_name={account.name} account has been successfully provisioned")

            step = STEP_USER
            user = self.users.create_user(record.user_request(), account.id)
            logger.info(
                f"account_id={account.id} user_id={user.id} email_address={user.email_address} "
                "user has been created and enabled for account"
            )

            if reset_password:
                step = STEP_PASSWORD_RESET
                self.users.reset_user_password(user.id)
        except ProvisionerError as exc:
            exc.step = step
            raise

        return ProvisioningResult(record=record, account=account, user=user, password_reset=reset_password)

    def provision_all(
        self,
        records: Iterable[AccountRecord],
        reactivate: bool = False,
        reset_password: bool = False,
        on_result: Optional[Callable[[ProvisioningResult], None]] = None,
    ) -> List[ProvisioningResult]:
        """Provision records strictly in order, stopping at the first failure.

        Args:
            records: Records to provision
            reactivate: Reactivate expired accounts
            reset_password: Send each user a password reset email
            on_result: Called after each successfully provisioned record

        Returns:
            Results for every record, in input order
        """
        results: List[ProvisioningResult] = []
        for record in records:
            result = self.provision(record, reactivate=reactivate, reset_password=reset_password)
            results.append(result)
            if on_result is not None:
                on_result(result)
        logger.info(f"count={len(results)} all accounts have been provisioned")
        return results
