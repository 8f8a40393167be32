# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Group Hierarchy Resolver

Turns the group ancestry DAG into ordered group chains and group
membership lists for every host, tallies group counters and applies
variable inheritance.

All traversal is done with explicit worklists bounded by an iteration
budget, so malformed (cyclic) input ends in a ConsistencyError instead of
looping or recursing without bound.
"""

from collections import deque
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from loguru import logger

from ansible_db.engine.errors import ConsistencyError
from ansible_db.inventory.group import Group, GroupCounters
from ansible_db.inventory.manager import ROOT_GROUP

if TYPE_CHECKING:
    from ansible_db.inventory.manager import Inventory

Chain = Tuple[str, ...]


class GroupResolver:
    """Resolve group chains, counters and inherited variables."""

    def __init__(self, inventory: 'Inventory', max_iterations: int = 10000):
        self.inventory = inventory
        self.max_iterations = max_iterations
        self._cache: Dict[str, Tuple[List[str], List[str]]] = {}

    def resolve(self) -> None:
        """Run the full resolution over every host, then tally and inherit."""
        for host in self.inventory.hosts:
            chains, groups = self.chains_for(host.parent)
            host.set_resolution(groups, chains)
            logger.debug("host {}: groups={} chains={}", host.name, groups, chains)
        self._tally()
        self._inherit_variables()

    def chains_for(self, group_name: str) -> Tuple[List[str], List[str]]:
        """
        Compute group chains and ordered groups for a group.

        Args:
            group_name: The group to resolve upward from (a host's parent)

        Returns:
            Tuple of (chains, groups). ``chains`` are comma-joined paths from
            a top-level group down to ``group_name``, led by ``"all"`` and
            ordered by length. ``groups`` lists every group on those chains,
            root-most first.
        """
        if group_name in self._cache:
            chains, groups = self._cache[group_name]
            return list(chains), list(groups)

        fragments = self._collect_fragments(group_name)
        merged = self._merge_fragments(fragments, group_name)

        chains = [ROOT_GROUP]
        for chain in merged:
            # only chains led by a true root are kept
            if self._group(chain[0]).is_top_level:
                chains.append(','.join(chain))
        chains.sort(key=lambda c: c.count(','))

        groups = self._rank_groups(chains, group_name)

        if groups == [ROOT_GROUP] and group_name != ROOT_GROUP:
            groups.append(group_name)
            chains.append(group_name)

        self._cache[group_name] = (chains, groups)
        return list(chains), list(groups)

    def _group(self, name: str) -> Group:
        group = self.inventory.group_index.get(name)
        if group is None:
            raise ConsistencyError(f"group {name} does not exist in the inventory", name=name)
        return group

    def _collect_fragments(self, start: str) -> List[Chain]:
        """Walk ancestors breadth-first, recording (parent, child) edges."""
        visited: Dict[str, None] = {start: None}
        fragments: Dict[Chain, None] = {}
        queue = deque([start])
        iterations = 0
        while queue:
            iterations += 1
            if iterations > self.max_iterations:
                raise ConsistencyError(
                    f"failed to get parent groups: exceeded {self.max_iterations} (max) iterations",
                    name=start,
                )
            child = queue.popleft()
            for parent in self._group(child).ancestors:
                if parent not in visited:
                    visited[parent] = None
                    queue.append(parent)
                if parent != ROOT_GROUP:
                    fragments.setdefault((parent, child))
        return list(fragments)

    def _merge_fragments(self, fragments: List[Chain], start: str) -> List[Chain]:
        """Concatenate fragments until every chain is maximal."""
        chains = list(fragments)
        for _ in range(self.max_iterations):
            found = _find_merge(chains)
            if found is None:
                return chains
            upper, lowers = found
            # upper is extended by every lower it meets, then dropped
            chains.remove(upper)
            for lower in lowers:
                merged = upper + lower[1:]
                if len(set(merged)) != len(merged):
                    raise ConsistencyError(
                        f"group cycle detected: {' -> '.join(merged)}", name=start
                    )
                if merged not in chains:
                    chains.append(merged)
        raise ConsistencyError(
            f"failed to assemble group chains: exceeded {self.max_iterations} (max) iterations",
            name=start,
        )

    def _rank_groups(self, chains: List[str], start: str) -> List[str]:
        """Peel chains one level per round; a group ranks by its last peel."""
        rank: Dict[str, int] = {}
        remaining = [chain.split(',') for chain in chains]
        for depth in range(self.max_iterations):
            remaining = [chain for chain in remaining if chain]
            if not remaining:
                # stable: equal depths keep first-seen order
                return sorted(rank, key=rank.__getitem__)
            for chain in remaining:
                rank[chain.pop(0)] = depth
        raise ConsistencyError(
            f"failed to create a list of unique groups: exceeded {self.max_iterations} (max) iterations",
            name=start,
        )

    def _tally(self) -> None:
        """Count hosts and sub-groups per group; reject empty groups."""
        for group in self.inventory.groups:
            group.counters = GroupCounters()
        for host in self.inventory.hosts:
            for name in host.groups:
                self._group(name).counters.hosts += 1
        for group in self.inventory.groups:
            for ancestor in group.ancestors:
                self._group(ancestor).counters.groups += 1
        for group in self.inventory.groups:
            if group.name != ROOT_GROUP and group.counters.hosts < 1:
                raise ConsistencyError(f"inventory group '{group.name}' has no hosts", name=group.name)

    def _inherit_variables(self) -> None:
        for host in self.inventory.hosts:
            inherited: Dict[str, str] = {}
            for name in host.groups:
                for key, value in self._group(name).variables.items():
                    inherited.setdefault(key, value)
            host.inherit_variables(inherited)


def _find_merge(chains: List[Chain]) -> Optional[Tuple[Chain, List[Chain]]]:
    """First chain ending at another chain's head, with all such lowers."""
    for upper in chains:
        lowers = [lower for lower in chains if lower != upper and lower[0] == upper[-1]]
        if lowers:
            return upper, lowers
    return None
