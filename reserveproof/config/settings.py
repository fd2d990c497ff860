"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Configuration management for ReserveProof.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import csv
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from reserveproof.exceptions import InvalidConfigurationError
from reserveproof.leaves import Account
from reserveproof.logging_config import get_logger
from reserveproof.merkle.hashing import (
    BITCOIN_TRANSACTION_TAG,
    PROOF_OF_RESERVE_BRANCH_TAG,
    PROOF_OF_RESERVE_LEAF_TAG,
    HashPolicy,
    classic_policy,
    tagged_policy,
)

logger = get_logger(__name__)

# Environment variable naming the configuration file
CONFIG_PATH_ENV_VAR = "RESERVEPROOF_CONFIG"

HASH_MODES = ["tagged", "classic"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMATS = ["console", "json"]


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${LEAF_TAG}" -> value of LEAF_TAG env var
        "${LISTEN:0.0.0.0:3000}" -> value of LISTEN or "0.0.0.0:3000" if not set
    """
    if isinstance(value, str):
        # Pattern matches ${VAR} or ${VAR:default}
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


def _default_account_records() -> List[Dict[str, int]]:
    # Demo balances committed by the reference deployment
    return [{"id": i, "balance": i * 1111} for i in range(1, 9)]


@dataclass
class HashingConfig:
    """Hash policy configuration."""

    mode: str = "tagged"  # "tagged" or "classic"
    leaf_tag: str = PROOF_OF_RESERVE_LEAF_TAG
    branch_tag: str = PROOF_OF_RESERVE_BRANCH_TAG  # Ignored in classic mode
    parallel_threshold: int = 100


@dataclass
class AccountsConfig:
    """Account source configuration."""

    file: str = ""  # CSV file with "id,balance" header; takes precedence over records
    records: List[Dict[str, Any]] = field(default_factory=_default_account_records)


@dataclass
class ServerConfig:
    """HTTP service configuration."""

    listen_address: str = "0.0.0.0:3000"
    service_name: str = "reserveproof-api"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"  # "console" or "json"


@dataclass
class ReserveProofConfig:
    """Main ReserveProof configuration."""

    hashing: HashingConfig = field(default_factory=HashingConfig)
    accounts: AccountsConfig = field(default_factory=AccountsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.environ.get(
        CONFIG_PATH_ENV_VAR, os.path.expanduser("~/.reserveproof/config.yaml")
    )


def get_default_config() -> ReserveProofConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        ReserveProofConfig: Default configuration object
    """
    return ReserveProofConfig()


def load_config(config_path: Optional[str] = None) -> ReserveProofConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        ReserveProofConfig: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(str(config_path))

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Configuration file '{config_path}' must contain a mapping at the top level"
        )

    config_data = _expand_env_vars(config_data)

    try:
        config = _build_config_from_dict(config_data)
        _validate_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e

    logger.info(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(f"'{name}' section must be a mapping")
    return section


def _build_config_from_dict(config_data: Dict[str, Any]) -> ReserveProofConfig:
    """
    Build ReserveProofConfig from dictionary loaded from YAML.

    Merges user configuration with defaults.

    Args:
        config_data: Dictionary loaded from YAML file

    Returns:
        ReserveProofConfig: Configuration object
    """
    default_config = get_default_config()

    hashing_data = _section(config_data, 'hashing')
    mode = str(hashing_data.get('mode', default_config.hashing.mode)).lower()
    # Classic mode defaults to the Bitcoin transaction leaf tag
    default_leaf_tag = (
        BITCOIN_TRANSACTION_TAG if mode == "classic" else default_config.hashing.leaf_tag
    )
    hashing = HashingConfig(
        mode=mode,
        leaf_tag=hashing_data.get('leaf_tag', default_leaf_tag),
        branch_tag=hashing_data.get('branch_tag', default_config.hashing.branch_tag),
        parallel_threshold=int(
            hashing_data.get('parallel_threshold', default_config.hashing.parallel_threshold)
        ),
    )

    accounts_data = _section(config_data, 'accounts')
    accounts = AccountsConfig(
        file=os.path.expanduser(accounts_data.get('file', default_config.accounts.file) or ""),
        records=accounts_data.get('records', default_config.accounts.records),
    )

    server_data = _section(config_data, 'server')
    server = ServerConfig(
        listen_address=str(
            server_data.get('listen_address', default_config.server.listen_address)
        ),
        service_name=server_data.get('service_name', default_config.server.service_name),
    )

    logging_data = _section(config_data, 'logging')
    logging = LoggingConfig(
        level=str(logging_data.get('level', default_config.logging.level)),
        file=os.path.expanduser(logging_data.get('file', default_config.logging.file) or ""),
        format=str(logging_data.get('format', default_config.logging.format)).lower(),
    )

    return ReserveProofConfig(
        hashing=hashing,
        accounts=accounts,
        server=server,
        logging=logging,
    )


def _validate_config(config: ReserveProofConfig) -> None:
    """
    Validate configuration values.

    Args:
        config: Configuration to validate

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    if config.hashing.mode not in HASH_MODES:
        raise InvalidConfigurationError(
            f"hashing mode must be one of {HASH_MODES}, got '{config.hashing.mode}'"
        )
    for name in ("leaf_tag", "branch_tag"):
        value = getattr(config.hashing, name)
        if not isinstance(value, str):
            raise InvalidConfigurationError(
                f"{name} must be a string, got {type(value).__name__}"
            )
    if not config.hashing.leaf_tag:
        raise InvalidConfigurationError("leaf_tag cannot be empty")
    if config.hashing.mode == "tagged" and not config.hashing.branch_tag:
        raise InvalidConfigurationError("branch_tag cannot be empty in tagged mode")
    if config.hashing.parallel_threshold < 2:
        raise InvalidConfigurationError(
            f"parallel_threshold must be at least 2, got {config.hashing.parallel_threshold}"
        )

    if not isinstance(config.accounts.records, list):
        raise InvalidConfigurationError("accounts records must be a list")
    if not config.accounts.file:
        # Inline records are validated eagerly; a file is read on demand
        _accounts_from_records(config.accounts.records)

    parse_listen_address(config.server.listen_address)

    if config.logging.level.upper() not in LOG_LEVELS:
        raise InvalidConfigurationError(
            f"logging level must be one of {LOG_LEVELS}, got '{config.logging.level}'"
        )
    if config.logging.format not in LOG_FORMATS:
        raise InvalidConfigurationError(
            f"logging format must be one of {LOG_FORMATS}, got '{config.logging.format}'"
        )


def parse_listen_address(listen_address: str) -> Tuple[str, int]:
    """
    Split a "host:port" listen address.

    Returns:
        Tuple of (host, port)

    Raises:
        InvalidConfigurationError: If the address is malformed
    """
    host, sep, port = listen_address.rpartition(":")
    if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
        raise InvalidConfigurationError(
            f"listen_address must be 'host:port', got '{listen_address}'"
        )
    return host, int(port)


def _to_account(record: Any, where: str) -> Account:
    if not isinstance(record, dict):
        raise InvalidConfigurationError(f"{where}: account record must be a mapping")
    try:
        account_id = int(record['id'])
        balance = int(record['balance'])
    except KeyError as e:
        raise InvalidConfigurationError(f"{where}: account record is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"{where}: invalid account record: {e}") from e

    if balance < 0:
        raise InvalidConfigurationError(
            f"{where}: balance of account {account_id} must be non-negative, got {balance}"
        )
    return Account(id=account_id, balance=balance)


def _accounts_from_records(records: List[Any], source: str = "accounts.records") -> List[Account]:
    accounts = []
    seen = set()
    for i, record in enumerate(records):
        account = _to_account(record, f"{source}[{i}]")
        if account.id in seen:
            raise InvalidConfigurationError(f"{source}: duplicate account id {account.id}")
        seen.add(account.id)
        accounts.append(account)
    return accounts


def _read_accounts_csv(path: str) -> List[Account]:
    try:
        with open(path, 'r', newline='') as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None or not {'id', 'balance'} <= set(reader.fieldnames):
                raise InvalidConfigurationError(
                    f"Accounts file '{path}' must have an 'id,balance' header"
                )
            records = list(reader)
    except OSError as e:
        logger.error(f"Failed to read accounts file '{path}': {e}", exc_info=True)
        raise InvalidConfigurationError(f"Failed to read accounts file '{path}': {e}") from e

    return _accounts_from_records(records, source=path)


def load_accounts(config: ReserveProofConfig) -> List[Account]:
    """
    Resolve the ordered account list a snapshot commits to.

    The CSV file named by accounts.file wins over inline records. File order
    (or record order) is the leaf order.

    Args:
        config: Loaded configuration

    Returns:
        Ordered list of accounts

    Raises:
        InvalidConfigurationError: If the source is unreadable or invalid
    """
    if config.accounts.file:
        accounts = _read_accounts_csv(config.accounts.file)
        logger.info(f"Loaded {len(accounts)} accounts from {config.accounts.file}")
    else:
        accounts = _accounts_from_records(config.accounts.records)
        logger.debug(f"Loaded {len(accounts)} accounts from inline records")
    return accounts


def policy_from_settings(hashing: HashingConfig) -> HashPolicy:
    """
    Build the hash policy described by the hashing section.

    Args:
        hashing: Hashing configuration

    Returns:
        HashPolicy for tagged or classic mode

    Raises:
        InvalidConfigurationError: If the mode is unknown
    """
    if hashing.mode == "tagged":
        return tagged_policy(hashing.leaf_tag, hashing.branch_tag)
    if hashing.mode == "classic":
        return classic_policy(hashing.leaf_tag)
    raise InvalidConfigurationError(
        f"hashing mode must be one of {HASH_MODES}, got '{hashing.mode}'"
    )
