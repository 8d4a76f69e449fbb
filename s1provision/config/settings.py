"""Settings loader with YAML file, environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from s1provision.core import validators
from s1provision.errors import ConfigLoadError, ConfigParseError, ConfigValidationError
from s1provision.logging_config import parse_log_level

logger = logging.getLogger(__name__)

ENV_PREFIX = "S1PROVISION_"
DEFAULT_CONFIG_FILES = ("config.yaml", "config.yml")
DEFAULT_CSV_SEPARATOR = ","
API_KEY_SECRET_NAME = "s1_api_key"

# field name -> key path in the YAML file (also used to derive the env var)
SETTING_KEYS: Dict[str, tuple[str, ...]] = {
    "api_key": ("global", "api_key"),
    "tenant_url": ("global", "tenant_url"),
    "log_level": ("global", "log_level"),
    "csv_source": ("command", "provision", "account", "csv_source"),
    "csv_separator": ("command", "provision", "account", "csv_separator"),
    "reactivate_expired_account": ("command", "provision", "account", "reactivate_expired_account"),
    "reset_first_user_password": ("command", "provision", "account", "reset_first_user_password"),
}
BOOLEAN_SETTINGS = {"reactivate_expired_account", "reset_first_user_password"}
CONFIG_FILE_ENV = f"{ENV_PREFIX}GLOBAL_CONFIG_FILE"


def env_var_for(setting: str) -> str:
    """Return the environment variable name for a setting.

    >>> env_var_for("csv_source")
    'S1PROVISION_COMMAND_PROVISION_ACCOUNT_CSV_SOURCE'
    """
    return ENV_PREFIX + "_".join(SETTING_KEYS[setting]).upper()


def _load_secret_from_file(secret_name: str, secrets_dir: Path = Path("/run/secrets")) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Returns:
        Secret value or None if not found
    """
    secret_file = secrets_dir / secret_name
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
        except OSError as e:
            logger.warning(f"failed to read {secret_file}: {e}")
            return None
        if secret_value:
            logger.debug(f"loaded {secret_name} from {secrets_dir}")
            return secret_value
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """Application configuration container."""
    # Global
    api_key: str = ""
    tenant_url: str = ""
    log_level: str = "info"
    config_file: str = ""

    # provision account
    csv_source: str = ""
    csv_separator: str = DEFAULT_CSV_SEPARATOR
    reactivate_expired_account: bool = False
    reset_first_user_password: bool = False

    @property
    def logging_level(self) -> int:
        return parse_log_level(self.log_level)

    def require_api_credentials(self) -> None:
        """Ensure the API key and tenant URL are present.

        Raises:
            ConfigValidationError: If either is missing
        """
        if not self.api_key:
            raise ConfigValidationError(
                "api_key", "", f"an API key is required (--api-key or {env_var_for('api_key')})", self.config_file
            )
        if not self.tenant_url:
            raise ConfigValidationError(
                "tenant_url", "", f"a tenant URL is required (--tenant-url or {env_var_for('tenant_url')})",
                self.config_file,
            )
        if not self.tenant_url.startswith(("https://", "http://")):
            raise ConfigValidationError(
                "tenant_url", self.tenant_url, "tenant URL must start with https:// or http://", self.config_file
            )

    def as_dict(self) -> Dict[str, Any]:
        """Settings as a dict with the API key masked."""
        values = asdict(self)
        values["api_key"] = "***" if self.api_key else ""
        return values


def _find_config_file(explicit: Optional[str], cwd: Path) -> tuple[Optional[Path], bool]:
    """Return (path, required) for the config file to read."""
    if explicit:
        return Path(os.path.expandvars(explicit)).expanduser().resolve(), True
    for name in DEFAULT_CONFIG_FILES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate.resolve(), False
    return None, False


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML config file.

    Raises:
        ConfigLoadError: File missing or unreadable
        ConfigParseError: Not valid YAML or not a mapping
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigLoadError(str(path), "configuration file not found") from None
    except OSError as e:
        raise ConfigLoadError(str(path), str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(str(path), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(str(path), "top-level YAML value must be a mapping")
    return data


def _lookup(data: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = data
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            return None
        node = node[key]
    return node


def load_settings(
    cli_overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
    secrets_dir: Path = Path("/run/secrets"),
) -> AppConfig:
    """Load application settings.

    Priority (highest first):
    1. Command-line flags (``cli_overrides``; ``None`` values are ignored)
    2. Environment variables (``S1PROVISION_GLOBAL_API_KEY``, ...)
    3. Docker secret ``/run/secrets/s1_api_key`` (API key only)
    4. YAML config file (``--config-file``, ``S1PROVISION_GLOBAL_CONFIG_FILE``
       or ``config.yaml`` / ``config.yml`` in the working directory)
    5. Defaults

    Raises:
        ConfigLoadError, ConfigParseError, ConfigValidationError
    """
    overrides = {key: value for key, value in (cli_overrides or {}).items() if value is not None}
    env = os.environ if environ is None else environ
    cwd = cwd or Path.cwd()

    explicit_file = overrides.get("config_file") or env.get(CONFIG_FILE_ENV)
    config_path, _ = _find_config_file(explicit_file, cwd)
    file_data = _read_config_file(config_path) if config_path else {}
    config_file = str(config_path) if config_path else ""

    values: Dict[str, Any] = {}
    for setting, key_path in SETTING_KEYS.items():
        value = _lookup(file_data, key_path)
        if setting == "api_key":
            value = _load_secret_from_file(API_KEY_SECRET_NAME, secrets_dir) or value
        env_value = env.get(env_var_for(setting))
        if env_value is not None and env_value != "":
            value = env_value
        if setting in overrides:
            value = overrides[setting]
        if value is None:
            continue
        values[setting] = _to_bool(value) if setting in BOOLEAN_SETTINGS else str(value)

    config = AppConfig(config_file=config_file, **values)

    # log level
    try:
        parse_log_level(config.log_level)
    except ValueError as e:
        raise ConfigValidationError("log_level", config.log_level, str(e), config_file) from e

    # CSV options only matter when a CSV source is given
    if config.csv_source:
        if not config.csv_separator:
            logger.warning(
                f"an empty CSV separator is not allowed ; defaulting to {DEFAULT_CSV_SEPARATOR} for separator"
            )
            config.csv_separator = DEFAULT_CSV_SEPARATOR
        try:
            validators.validate_csv_separator(config.csv_separator)
        except ValueError as e:
            raise ConfigValidationError("csv_separator", config.csv_separator, str(e), config_file) from e

        csv_path = Path(config.csv_source)
        if not csv_path.is_absolute():
            csv_path = cwd / csv_path
        if not csv_path.is_file():
            raise ConfigValidationError(
                "csv_source", config.csv_source, f"CSV file '{config.csv_source}' does not exist", config_file
            )
        config.csv_source = str(csv_path)

    logger.debug(f"loaded settings: {config.as_dict()}")
    return config
