"""CSV provisioning record source.

Each row describes one account and its first administrative user. Rows are
yielded in file order.
"""
from __future__ import annotations
import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List

from s1provision.core import validators
from s1provision.core.sentinelone.models import AccountProvisioningRequest, UserProvisioningRequest
from s1provision.errors import GeneralFailure, RecordDecodeError

DEFAULT_CSV_SEPARATOR = ","

RECORD_COLUMNS = (
    "account_name",
    "account_type",
    "expires",
    "external_id",
    "bundle",
    "total_agents",
    "modules",
    "first_name",
    "last_name",
    "email_address",
    "role",
)


@dataclass
class AccountRecord:
    """One row of a provisioning CSV file."""
    account_name: str
    account_type: str
    expires: str
    external_id: str
    bundle: str
    total_agents: int
    first_name: str
    last_name: str
    email_address: str
    role: str
    modules: List[str] = field(default_factory=list)

    def account_request(self, reactivate: bool = False) -> AccountProvisioningRequest:
        return AccountProvisioningRequest(
            account_name=self.account_name,
            account_type=self.account_type,
            expires=self.expires,
            external_id=self.external_id,
            reactivate_account=reactivate,
            bundle=self.bundle,
            total_agents=self.total_agents,
            modules=list(self.modules),
        )

    def user_request(self) -> UserProvisioningRequest:
        return UserProvisioningRequest(
            first_name=self.first_name,
            last_name=self.last_name,
            email_address=self.email_address,
            role=self.role,
        )


def split_modules(raw: str) -> List[str]:
    """Split a comma separated module list, dropping blank entries."""
    return [module.strip() for module in (raw or "").split(",") if module.strip()]


def parse_record(row: dict, line: int) -> AccountRecord:
    """Convert one CSV row into an AccountRecord.

    Raises:
        RecordDecodeError: If a value is missing or invalid
    """
    values = {column: (row.get(column) or "").strip() for column in RECORD_COLUMNS}

    if not values["account_name"]:
        raise RecordDecodeError("account_name is required", line)
    if not values["expires"]:
        raise RecordDecodeError("expires is required", line)

    try:
        total_agents = int(values["total_agents"] or 0)
    except ValueError:
        raise RecordDecodeError(f"total_agents '{values['total_agents']}' is not an integer", line) from None
    if total_agents < 0:
        raise RecordDecodeError("total_agents cannot be negative", line)

    try:
        email = validators.validate_email(values["email_address"])
        first_name = validators.validate_name(values["first_name"], "First name")
        last_name = validators.validate_name(values["last_name"], "Last name")
    except ValueError as exc:
        raise RecordDecodeError(str(exc), line) from exc

    if not values["role"]:
        raise RecordDecodeError("role is required", line)

    return AccountRecord(
        account_name=values["account_name"],
        account_type=values["account_type"],
        expires=values["expires"],
        external_id=values["external_id"],
        bundle=values["bundle"],
        total_agents=total_agents,
        modules=split_modules(values["modules"]),
        first_name=first_name,
        last_name=last_name,
        email_address=email,
        role=values["role"],
    )


def read_account_records(path: str | Path, separator: str = DEFAULT_CSV_SEPARATOR) -> Iterator[AccountRecord]:
    """Yield provisioning records from a CSV file in file order.

    The first row must be a header naming the record columns; extra columns
    are ignored.

    Args:
        path: CSV file path
        separator: Single-character field separator

    Raises:
        GeneralFailure: File cannot be opened
        RecordDecodeError: Header or a row is invalid
    """
    try:
        separator = validators.validate_csv_separator(separator)
    except ValueError as exc:
        raise RecordDecodeError(str(exc)) from exc

    try:
        handle = open(path, newline="", encoding="utf-8-sig")
    except OSError as exc:
        raise GeneralFailure(f"failed to open CSV file '{path}' for reading: {exc}") from exc

    with handle:
        reader = csv.DictReader(handle, delimiter=separator)
        try:
            header = reader.fieldnames or []
            missing = [column for column in RECORD_COLUMNS if column not in header]
            if missing:
                raise RecordDecodeError(f"failed to parse CSV file '{path}': missing columns {', '.join(missing)}")
            for row in reader:
                if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                    continue
                yield parse_record(row, reader.line_num)
        except csv.Error as exc:
            raise RecordDecodeError(f"failed to decode account record: {exc}", reader.line_num) from exc
