# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Inventory Parser

Parses INI inventory text into an Inventory of Host and Group objects,
then resolves the group hierarchy. The whole text is consumed in one pass;
any error aborts the load.
"""

import enum
from typing import Dict, Optional, Tuple

from loguru import logger

from ansible_db.engine.errors import ConsistencyError, FormatError
from ansible_db.inventory.manager import ROOT_GROUP, Inventory


class Section(enum.Enum):
    """Kind of section the parser is currently in."""
    DEFAULT = "default"
    HOSTS = "hosts"
    CHILDREN = "children"
    VARS = "vars"


SECTION_SUFFIXES = {
    "children": Section.CHILDREN,
    "vars": Section.VARS,
}


def scan_key_values(
    text: str,
    line: Optional[int] = None,
    max_iterations: int = 10000,
) -> Dict[str, str]:
    """
    Split ``key=value`` pairs where values may contain ``=`` or spaces.

    Each value runs up to the space that precedes the next ``key=``; the
    last value runs to the end of the text.

    >>> scan_key_values("os=cisco_nxos descr=core switch=1 opts=a=b")
    {'os': 'cisco_nxos', 'descr': 'core', 'switch': '1', 'opts': 'a=b'}
    """
    pairs: Dict[str, str] = {}
    rest = text.strip()
    for _ in range(max_iterations):
        if not rest:
            return pairs
        eq = rest.find("=")
        if eq < 0:
            raise FormatError(f"expected key=value, got {rest!r}", line=line)
        key = rest[:eq].strip()
        if not key or any(c.isspace() for c in key):
            raise FormatError(f"invalid variable name {key!r}", line=line)
        rest = rest[eq + 1:]
        boundary = _next_key_boundary(rest)
        if boundary < 0:
            pairs[key] = rest.strip()
            return pairs
        pairs[key] = rest[:boundary].strip()
        rest = rest[boundary + 1:].lstrip()
    raise ConsistencyError(
        f"key/value scan exceeded {max_iterations} (max) iterations", line=line
    )


def _next_key_boundary(rest: str) -> int:
    """Index of the space before the next ``key=`` token, or -1."""
    eq = rest.find("=")
    while eq >= 0:
        space = rest.rfind(" ", 0, eq)
        if space >= 0 and rest[space + 1:eq].strip():
            return space
        eq = rest.find("=", eq + 1)
    return -1


class InventoryParser:
    """
    Parse inventory text in INI format.

    Supports:
    - Hosts in the default section (members of ``all``)
    - ``[group]`` host sections
    - ``[group:children]`` sub-group sections
    - ``[group:vars]`` group variable sections
    - Inline host variables with values containing ``=`` or spaces
    """

    def __init__(self, max_iterations: int = 10000):
        self.max_iterations = max_iterations

    def parse(self, content: str, source: Optional[str] = None) -> Inventory:
        """
        Parse inventory text and resolve the group hierarchy.

        Args:
            content: Complete inventory text
            source: Optional file name used in error messages

        Returns:
            A resolved Inventory
        """
        inventory = Inventory(max_iterations=self.max_iterations)
        try:
            self._parse_lines(inventory, content)
            inventory.resolve()
        except FormatError as e:
            if source and not e.source:
                raise FormatError(e.reason, line=e.line, source=source, details=e.details) from e
            raise
        logger.debug(
            "loaded inventory{}: {} hosts, {} groups",
            f" from {source}" if source else "",
            inventory.size(),
            len(inventory.groups),
        )
        return inventory

    def _parse_lines(self, inventory: Inventory, content: str) -> None:
        section = Section.DEFAULT
        group_name = ROOT_GROUP

        for line_num, raw in enumerate(content.splitlines(), 1):
            line = raw.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            if line.startswith('[') and line.endswith(']'):
                group_name, section = self._parse_header(line, line_num)
                inventory.add_group(group_name, ROOT_GROUP, line=line_num)
                logger.debug("line {}: opened {} section for group {}", line_num, section.value, group_name)
                continue

            if section is Section.VARS:
                inventory.add_variable(
                    group_name,
                    scan_key_values(line, line_num, self.max_iterations),
                    line=line_num,
                )
            elif section is Section.CHILDREN:
                if len(line.split()) != 1:
                    raise FormatError(f"expected a single group name, got {line!r}", line=line_num)
                inventory.add_group(line, group_name, line=line_num)
            else:
                name, variables = self._parse_host_line(line, line_num)
                inventory.add_host(name, group_name, variables, line=line_num)

    def _parse_header(self, line: str, line_num: int) -> Tuple[str, Section]:
        """Parse ``[name]``, ``[name:children]`` or ``[name:vars]``."""
        label = line[1:-1].strip()
        parts = label.split(':')
        if len(parts) > 2:
            raise FormatError(f"invalid section: {line}", line=line_num)
        name = parts[0].strip()
        if not name or any(c.isspace() for c in name):
            raise FormatError(f"invalid group name in section: {line}", line=line_num)
        if len(parts) == 1:
            return name, Section.HOSTS
        section = SECTION_SUFFIXES.get(parts[1].strip())
        if section is None:
            raise FormatError(f"invalid section: {line}", line=line_num)
        return name, section

    def _parse_host_line(self, line: str, line_num: int) -> Tuple[str, Dict[str, str]]:
        """Split a host line into its name and inline variables."""
        parts = line.split(None, 1)
        name = parts[0]
        if '=' in name:
            raise FormatError(f"missing host name before variables: {line!r}", line=line_num)
        var_string = parts[1] if len(parts) > 1 else ''
        return name, scan_key_values(var_string, line_num, self.max_iterations)


def parse_inventory(content: str, max_iterations: int = 10000) -> Inventory:
    """Convenience function to parse inventory text."""
    return InventoryParser(max_iterations=max_iterations).parse(content)
