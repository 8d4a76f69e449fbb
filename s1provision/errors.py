"""Application-level exceptions and process exit codes.

Every exception raised by s1provision carries an ``exit_code`` so the CLI can
map the final error of a run to a process exit status.
"""
from __future__ import annotations
from typing import Any, Optional

# general errors (0-20)
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_GENERAL_FAILURE = 2

# configuration errors (21-40)
EXIT_CONFIG_LOAD = 21
EXIT_CONFIG_PARSE = 22
EXIT_CONFIG_VALIDATE = 23

# SentinelOne client errors (101-120)
EXIT_CLIENT_ERROR = 101
EXIT_CLIENT_REQUEST_ERROR = 102


class ProvisionerError(Exception):
    """Base exception for all s1provision failures.

    Attributes:
        step: Provisioning step that was running when the error was raised
            (set by the provisioning service, None elsewhere)
    """

    exit_code = EXIT_GENERAL_FAILURE
    step: Optional[str] = None


class UsageError(ProvisionerError):
    """Command-line usage error."""

    exit_code = EXIT_USAGE


class GeneralFailure(ProvisionerError):
    """General system failure (files, records, etc.)."""

    exit_code = EXIT_GENERAL_FAILURE


class RecordDecodeError(GeneralFailure):
    """A provisioning record could not be decoded.

    Attributes:
        line: Line number of the offending record (1-based, header is line 1)
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ConfigError(ProvisionerError):
    """Base exception for configuration errors.

    Attributes:
        config_file: Configuration file in use (may be empty)
    """

    def __init__(self, message: str, config_file: str = ""):
        self.config_file = config_file
        super().__init__(message)


class ConfigLoadError(ConfigError):
    """Configuration file could not be read."""

    exit_code = EXIT_CONFIG_LOAD

    def __init__(self, config_file: str, reason: str):
        super().__init__(f"error while loading configuration file '{config_file}': {reason}", config_file)


class ConfigParseError(ConfigError):
    """Configuration file is not valid YAML or not a mapping."""

    exit_code = EXIT_CONFIG_PARSE

    def __init__(self, config_file: str, reason: str):
        super().__init__(f"error while parsing configuration file '{config_file}': {reason}", config_file)


class ConfigValidationError(ConfigError):
    """A configuration setting or input value is invalid.

    Attributes:
        setting: Name of the invalid setting
        value: The rejected value
    """

    exit_code = EXIT_CONFIG_VALIDATE

    def __init__(self, setting: str, value: Any, reason: str, config_file: str = ""):
        self.setting = setting
        self.value = value
        if setting:
            message = f"the configuration setting '{setting}' is invalid: {reason}"
        else:
            message = f"one or more configuration settings are invalid: {reason}"
        super().__init__(message, config_file)


class ExpirationParseError(ConfigValidationError):
    """Account expiration is neither a duration nor an RFC 3339 timestamp."""

    def __init__(self, value: str):
        super().__init__(
            "expires",
            value,
            f"failed to parse account expiration time and date '{value}'",
        )
