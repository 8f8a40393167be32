# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db Configuration

Default locations and limits, optionally taken from the environment.
Command-line flags override these values.
"""

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

ENV_PREFIX = "ANSIBLE_DB_"


@dataclass
class DbConfig:
    """
    Configuration for loading inventories and vaults.

    Attributes:
        inventory_path: Inventory file read by the client
        vault_path: Vault file holding credentials
        vault_password_file: File whose first line is the vault password
        log_level: loguru level name for the client's stderr sink
        max_iterations: Bound on every resolution loop (malformed-input guard)
    """

    inventory_path: str = "hosts"
    vault_path: Optional[str] = None
    vault_password_file: Optional[str] = None
    log_level: str = "WARNING"
    max_iterations: int = 10000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'DbConfig':
        """Build a config from ``ANSIBLE_DB_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.name == "max_iterations":
                try:
                    value = int(raw)
                except ValueError:
                    raise ValueError(f"{ENV_PREFIX}MAX_ITERATIONS must be an integer, got {raw!r}") from None
                if value < 1:
                    raise ValueError(f"{ENV_PREFIX}MAX_ITERATIONS must be positive, got {value}")
                setattr(config, f.name, value)
            elif f.name == "log_level":
                setattr(config, f.name, raw.upper())
            else:
                setattr(config, f.name, raw)
        return config


# Default configuration
_config = DbConfig.from_env()


def get_config() -> DbConfig:
    """Get the current configuration."""
    return _config


def set_config(config: DbConfig) -> None:
    """Set the configuration."""
    global _config
    _config = config


def configure(**kwargs) -> None:
    """Update individual configuration settings."""
    for key, value in kwargs.items():
        if not hasattr(_config, key):
            raise AttributeError(f"unknown configuration setting: {key}")
        setattr(_config, key, value)
