# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db: Ansible inventory and vault as an in-memory database.

Loads an INI inventory into a resolved host/group model and decodes an
Ansible Vault of credential records, answering two questions:

    - which variables and groups does a host have?
    - which credentials apply to a host?

Both are read-only: data is loaded once and queried afterwards.
"""

from __future__ import annotations

from loguru import logger

from ansible_db.release import __version__, __author__
from ansible_db.engine.credentials import Credential, CredentialMatcher
from ansible_db.engine.errors import AnsibleDbError
from ansible_db.engine.vault import VaultLib, VaultSecret, decode_vault, load_vault_file
from ansible_db.inventory import Group, Host, Inventory, InventoryParser, parse_inventory

logger.disable("ansible_db")

__all__ = [
    "__version__",
    "__author__",
    "AnsibleDbError",
    "Credential",
    "CredentialMatcher",
    "Group",
    "Host",
    "Inventory",
    "InventoryParser",
    "VaultLib",
    "VaultSecret",
    "decode_vault",
    "load_vault_file",
    "parse_inventory",
]
