# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db Inventory Module

Provides INI inventory parsing, host/group modelling and group hierarchy
resolution.
"""

from ansible_db.inventory.host import Host
from ansible_db.inventory.group import Group, GroupCounters
from ansible_db.inventory.manager import ROOT_GROUP, Inventory
from ansible_db.inventory.parser import InventoryParser, parse_inventory, scan_key_values
from ansible_db.inventory.resolver import GroupResolver

__all__ = [
    'ROOT_GROUP',
    'Host',
    'Group',
    'GroupCounters',
    'Inventory',
    'InventoryParser',
    'GroupResolver',
    'parse_inventory',
    'scan_key_values',
]
