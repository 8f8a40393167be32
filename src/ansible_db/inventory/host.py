# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Inventory Host representation.

A Host is a single inventory entry declared under exactly one group.
"""

from typing import Any, Dict, List, Optional


class Host:
    """Represents a single host in the inventory."""

    def __init__(
        self,
        name: str,
        parent: str = "all",
        variables: Optional[Dict[str, str]] = None,
        line: Optional[int] = None,
    ):
        """
        Initialize a Host.

        Args:
            name: Hostname as written in the inventory
            parent: Name of the group the host was declared under
            variables: Inline host variables
            line: Line number of the declaration, for error messages
        """
        self.name = name
        self.parent = parent
        self.line = line
        self.variables: Dict[str, str] = variables.copy() if variables else {}
        self._groups: List[str] = []
        self._group_chains: List[str] = []

    @property
    def groups(self) -> List[str]:
        """Return ancestor group names, root-most first."""
        return self._groups.copy()

    @property
    def group_chains(self) -> List[str]:
        """Return comma-joined root-to-parent group paths."""
        return self._group_chains.copy()

    def set_resolution(self, groups: List[str], group_chains: List[str]) -> None:
        """Record the output of hierarchy resolution."""
        self._groups = list(groups)
        self._group_chains = list(group_chains)

    def inherit_variables(self, inherited: Dict[str, str]) -> None:
        """Merge group variables; keys declared on the host always win."""
        for key, value in inherited.items():
            self.variables.setdefault(key, value)

    def get_variable(self, key: str, default: Any = None) -> Any:
        """Get a host variable."""
        return self.variables.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "parent": self.parent,
            "variables": dict(sorted(self.variables.items())),
            "groups": self.groups,
            "group_chains": self.group_chains,
        }

    def __repr__(self) -> str:
        return f"Host(name={self.name!r}, parent={self.parent!r}, vars={self.variables})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Host):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)
