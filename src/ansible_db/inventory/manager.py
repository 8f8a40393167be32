# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db Inventory

Holds hosts and groups built by the parser and answers lookups.
Once ``resolve()`` has run the inventory is treated as read-only.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from ansible_db.engine.errors import (
    ConsistencyError,
    FormatError,
    NotFoundError,
    PatternError,
)
from ansible_db.inventory.group import Group
from ansible_db.inventory.host import Host

ROOT_GROUP = "all"

Filter = Union[str, Sequence[str], None]


class Inventory:
    """
    In-memory host/group model.

    ``host_index`` maps a host name to the group it was declared under and
    ``group_index`` maps a group name to its Group, so duplicate and
    undeclared references are rejected without scanning.
    """

    def __init__(self, max_iterations: int = 10000):
        self.max_iterations = max_iterations
        self.hosts: List[Host] = []
        self.groups: List[Group] = []
        self.host_index: Dict[str, str] = {}
        self.group_index: Dict[str, Group] = {}
        self._hosts_by_name: Dict[str, Host] = {}

        root = Group(ROOT_GROUP)
        self.groups.append(root)
        self.group_index[ROOT_GROUP] = root

    @classmethod
    def load_from_bytes(cls, data: bytes, max_iterations: int = 10000) -> 'Inventory':
        """Parse and resolve inventory text held in memory."""
        from ansible_db.inventory.parser import InventoryParser

        return InventoryParser(max_iterations=max_iterations).parse(_decode(data))

    @classmethod
    def load_from_file(cls, path: Union[str, Path], max_iterations: int = 10000) -> 'Inventory':
        """Read an inventory file fully and parse it."""
        from ansible_db.inventory.parser import InventoryParser

        source = Path(path)
        data = source.read_bytes()
        return InventoryParser(max_iterations=max_iterations).parse(
            _decode(data, str(source)), source=str(source)
        )

    def size(self) -> int:
        """Return the number of hosts."""
        return len(self.hosts)

    def __len__(self) -> int:
        return len(self.hosts)

    def __contains__(self, name: object) -> bool:
        return name in self.host_index

    def add_group(self, name: str, parent: str, line: Optional[int] = None) -> Group:
        """Declare a group, or add another parent to an existing one."""
        if parent not in self.group_index:
            raise FormatError(f"the parent group {parent} for group {name} does not exist", line=line)
        group = self.group_index.get(name)
        if group is None:
            group = Group(name)
            self.groups.append(group)
            self.group_index[name] = group
            logger.debug("declared group {} under {}", name, parent)
        if name != ROOT_GROUP:
            group.add_ancestor(parent)
        return group

    def add_host(
        self,
        name: str,
        group_name: str,
        variables: Optional[Dict[str, str]] = None,
        line: Optional[int] = None,
    ) -> Host:
        """Declare a host under a group. The first declaration wins."""
        if group_name not in self.group_index:
            raise FormatError(f"the group {group_name} for host {name} does not exist", line=line)
        existing = self.host_index.get(name)
        if existing is not None:
            if existing != group_name:
                raise ConsistencyError(
                    f"host {name} exists in multiple groups: {existing}, {group_name}",
                    name=name,
                    line=line,
                )
            logger.debug("host {} declared again under {}, keeping first", name, group_name)
            return self._hosts_by_name[name]
        host = Host(name, parent=group_name, variables=variables, line=line)
        self.hosts.append(host)
        self.host_index[name] = group_name
        self._hosts_by_name[name] = host
        return host

    def add_variable(self, group_name: str, variables: Dict[str, str], line: Optional[int] = None) -> None:
        """Attach variables to a declared group."""
        group = self.group_index.get(group_name)
        if group is None:
            raise FormatError(f"the group {group_name} does not exist", line=line)
        for key, value in variables.items():
            group.set_variable(key, value)

    def resolve(self) -> 'Inventory':
        """Resolve group chains, counters and inherited variables."""
        from ansible_db.inventory.resolver import GroupResolver

        GroupResolver(self, max_iterations=self.max_iterations).resolve()
        return self

    def get_hosts(self) -> List[Host]:
        """Return all hosts in declaration order."""
        return list(self.hosts)

    def get_host(self, name: str) -> Host:
        """Return a host by name."""
        try:
            return self._hosts_by_name[name]
        except KeyError:
            raise NotFoundError("host", name) from None

    def get_group(self, name: str) -> Group:
        """Return a group by name."""
        try:
            return self.group_index[name]
        except KeyError:
            raise NotFoundError("group", name) from None

    def get_hosts_with_filter(self, host_filter: Filter = None, group_filter: Filter = None) -> List[Host]:
        """
        Return hosts matching host or group name patterns.

        Args:
            host_filter: Regex (or list of regexes) searched in host names
            group_filter: Regex (or list of regexes) searched in each of a
                host's resolved group names

        Returns:
            Hosts matching any host pattern or any group pattern, in
            declaration order. With no filters, every host.
        """
        if host_filter is None and group_filter is None:
            return self.get_hosts()

        host_patterns = _compile_filters(host_filter)
        group_patterns = _compile_filters(group_filter)

        matched = []
        for host in self.hosts:
            if any(p.search(host.name) for p in host_patterns):
                matched.append(host)
                continue
            if any(p.search(g) for p in group_patterns for g in host.groups):
                matched.append(host)
        return matched

    def walk_children(self, name: str) -> Iterable[Group]:
        """Yield groups naming ``name`` as an immediate parent."""
        for group in self.groups:
            if name in group.ancestors:
                yield group

    def __repr__(self) -> str:
        return f"Inventory(hosts={len(self.hosts)}, groups={len(self.groups)})"


def _decode(data: bytes, source: Optional[str] = None) -> str:
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        line = data[:e.start].count(b'\n') + 1
        raise FormatError(f"inventory is not valid UTF-8: {e.reason}", line=line, source=source) from e


def _compile_filters(value: Filter) -> List['re.Pattern[str]']:
    if value is None:
        return []
    if isinstance(value, str):
        patterns = [value]
    elif isinstance(value, (list, tuple)):
        patterns = list(value)
    else:
        raise TypeError(f"unsupported filter type: {type(value).__name__}")
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise PatternError(f"filter contains invalid pattern: {pattern}, error: {e}", pattern) from e
    return compiled
