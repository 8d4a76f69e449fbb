"""Command-line tool for provisioning SentinelOne accounts and users.

This module serves as a CLI wrapper around s1provision.core services.
"""
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from s1provision import __command__, __title__, __version__
from s1provision.config import AppConfig, load_settings
from s1provision.core.provisioning_service import STEP_ACCOUNT, ProvisioningResult, ProvisioningService
from s1provision.core.records import AccountRecord, read_account_records
from s1provision.core.sentinelone import SentinelOneClient
from s1provision.errors import (
    EXIT_OK,
    EXIT_USAGE,
    ConfigError,
    ExpirationParseError,
    GeneralFailure,
    ProvisionerError,
)
from s1provision.logging_config import LOG_LEVELS, configure_logging
from scripts import audit

logger = logging.getLogger("s1provision.cli")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with the usage exit code."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=__command__, description=__title__)
    parser.add_argument("-k", "--api-key", help="SentinelOne API key")
    parser.add_argument("-t", "--tenant-url", help="SentinelOne tenant URL")
    parser.add_argument("-f", "--config-file", help="path to configuration file")
    parser.add_argument(
        "-l",
        "--log-level",
        help=f"set logging level to {', '.join(LOG_LEVELS)}",
    )
    parser.add_argument("--operator", default="cli",
                        help="Operator identifier for audit logs (default: cli)")

    sub = parser.add_subparsers(dest="cmd", parser_class=_ArgumentParser)

    sub.add_parser("version", help="show version information")

    prov = sub.add_parser("provision", help="provision SentinelOne resources")
    prov_sub = prov.add_subparsers(dest="resource", parser_class=_ArgumentParser)

    acct = prov_sub.add_parser("account", help="provision accounts and their first user")
    acct.add_argument("--csv-source", help="provision accounts from the given CSV file")
    acct.add_argument("--csv-separator", help="when using a CSV, this is the separator token")
    acct.add_argument("--reactivate-expired-account", action="store_const", const=True, default=None,
                      help="if an account exists and is expired, reactivate it")
    acct.add_argument("--reset-first-user-password", action="store_const", const=True, default=None,
                      help="send the first user a password reset email")
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    return {
        "api_key": args.api_key,
        "tenant_url": args.tenant_url,
        "config_file": args.config_file,
        "log_level": args.log_level,
        "csv_source": getattr(args, "csv_source", None),
        "csv_separator": getattr(args, "csv_separator", None),
        "reactivate_expired_account": getattr(args, "reactivate_expired_account", None),
        "reset_first_user_password": getattr(args, "reset_first_user_password", None),
    }


def _audit_result(result: ProvisioningResult, config: AppConfig, operator: str) -> None:
    audit.safe_log_provision_event(
        "account_provision",
        result.account.name,
        operator=operator,
        tenant=config.tenant_url,
        details={"account_id": result.account.id, "state": result.account.state},
        success=True,
    )
    audit.safe_log_provision_event(
        "user_provision",
        result.user.email_address,
        operator=operator,
        tenant=config.tenant_url,
        details={"user_id": result.user.id, "account_id": result.account.id},
        success=True,
    )
    if result.password_reset:
        audit.safe_log_provision_event(
            "password_reset",
            result.user.email_address,
            operator=operator,
            tenant=config.tenant_url,
            details={"user_id": result.user.id},
            success=True,
        )


def provision_accounts(config: AppConfig, operator: str = "cli") -> List[ProvisioningResult]:
    """Provision every record of the configured CSV source, in order."""
    config.require_api_credentials()
    client = SentinelOneClient(config.tenant_url, config.api_key)
    service = ProvisioningService(client)

    current: dict = {}

    def on_result(result: ProvisioningResult) -> None:
        current.pop("record", None)
        _audit_result(result, config, operator)

    def tracked() -> Iterator[AccountRecord]:
        for record in read_account_records(config.csv_source, config.csv_separator):
            current["record"] = record
            yield record

    try:
        return service.provision_all(
            tracked(),
            reactivate=config.reactivate_expired_account,
            reset_password=config.reset_first_user_password,
            on_result=on_result,
        )
    except ProvisionerError as e:
        record = current.get("record")
        if record is not None:
            step = e.step or STEP_ACCOUNT
            target = record.account_name if step == STEP_ACCOUNT else record.email_address
            audit.safe_log_provision_event(
                step,
                target,
                operator=operator,
                tenant=config.tenant_url,
                details={
                    "account_name": record.account_name,
                    "email_address": record.email_address,
                    "error": str(e),
                },
                success=False,
            )
        raise


def _run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.cmd == "version":
        print(f"{__title__} {__version__}")
        return EXIT_OK

    if args.cmd == "provision" and args.resource == "account":
        config = load_settings(_cli_overrides(args))
        configure_logging(config.log_level)
        if not config.csv_source:
            print("\n\n-- Only CSV provisioning is supported at this time --\n\n")
            return EXIT_OK
        results = provision_accounts(config, operator=args.operator)
        print(f"Provisioned {len(results)} account(s)")
        return EXIT_OK

    parser.print_help()
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point; returns the process exit code."""
    configure_logging(logging.INFO)
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        exit_code = _run(args, parser)
    except ExpirationParseError as e:
        exit_code = e.exit_code
    except (ConfigError, GeneralFailure) as e:
        # remote failures are logged where they are detected; these are not
        logger.error(str(e))
        exit_code = e.exit_code
    except ProvisionerError as e:
        exit_code = e.exit_code

    if exit_code not in (EXIT_OK, EXIT_USAGE):
        logger.warning(f"exit_code={exit_code} exiting with non-zero exit code: {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
