"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Configuration management for ReserveProof.

Handles loading and validation of configuration files.
"""

from reserveproof.config.settings import (
    AccountsConfig,
    HashingConfig,
    LoggingConfig,
    ReserveProofConfig,
    ServerConfig,
    get_default_config,
    get_default_config_path,
    load_accounts,
    load_config,
    parse_listen_address,
    policy_from_settings,
)

__all__ = [
    "AccountsConfig",
    "HashingConfig",
    "LoggingConfig",
    "ReserveProofConfig",
    "ServerConfig",
    "get_default_config",
    "get_default_config_path",
    "load_accounts",
    "load_config",
    "parse_listen_address",
    "policy_from_settings",
]
