# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Inventory Group representation.

Groups form a DAG: a group may list several parents in ``ancestors``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class GroupCounters:
    """Number of hosts and sub-groups resolving through a group."""

    hosts: int = 0
    groups: int = 0


class Group:
    """Represents a group of hosts in the inventory."""

    def __init__(
        self,
        name: str,
        variables: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize a Group.

        Args:
            name: Group name
            variables: Group-specific variables
        """
        self.name = name
        self.variables: Dict[str, str] = variables.copy() if variables else {}
        self.counters = GroupCounters()
        self._ancestors: List[str] = []

    @property
    def ancestors(self) -> List[str]:
        """Return immediate parent group names in declaration order."""
        return self._ancestors.copy()

    @property
    def is_top_level(self) -> bool:
        """A group whose only parent is the root group."""
        return self._ancestors == ["all"]

    def add_ancestor(self, group_name: str) -> None:
        """Record a parent group."""
        if group_name not in self._ancestors:
            self._ancestors.append(group_name)

    def set_variable(self, key: str, value: str) -> None:
        """Set a group variable."""
        self.variables[key] = value

    def get_variable(self, key: str, default: Any = None) -> Any:
        """Get a group variable."""
        return self.variables.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "ancestors": self.ancestors,
            "variables": dict(sorted(self.variables.items())),
            "counters": {"hosts": self.counters.hosts, "groups": self.counters.groups},
        }

    def __repr__(self) -> str:
        return f"Group({self.name!r}, ancestors={self._ancestors}, hosts={self.counters.hosts})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)
