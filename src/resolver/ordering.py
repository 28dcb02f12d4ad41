"""Installation ordering that tolerates dependency cycles.

Packages that depend on each other in a cycle form a strongly connected
component (SCC). Collapsing every SCC into one node yields an acyclic
condensation graph, which is sorted topologically; members of one SCC are
emitted together in alphabetical order. Dependencies are installed before the
packages that require them.
"""
from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled

from .errors import InstallOrderError
from .models import PackageRecord

logger = logging.getLogger(__name__)


def build_adjacency(packages: Iterable[PackageRecord]) -> Dict[str, List[str]]:
    """Map every package name to the names it requires.

    Every package is a node even when it has no requirements.
    """
    adjacency: Dict[str, List[str]] = {}
    for pkg in packages:
        adjacency.setdefault(pkg.name, []).extend(pkg.requires)
    return adjacency


def find_strongly_connected_components(adjacency: Mapping[str, Sequence[str]]) -> List[List[str]]:
    """Tarjan's algorithm with an explicit work stack.

    Roots and neighbours are visited in alphabetical order so the output is
    deterministic. Edges to names that are not nodes are ignored.

    Returns:
        Components in the order Tarjan emits them (dependencies first).
    """
    index_of: Dict[str, int] = {}
    low: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[List[str]] = []
    neighbours = {node: sorted(edges) for node, edges in adjacency.items()}
    counter = 0

    for root in sorted(adjacency):
        if root in index_of:
            continue
        index_of[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        # (node, position of the next neighbour to visit)
        work: List[Tuple[str, int]] = [(root, 0)]

        while work:
            node, pos = work[-1]
            edges = neighbours[node]
            if pos < len(edges):
                work[-1] = (node, pos + 1)
                target = edges[pos]
                if target not in adjacency:
                    continue
                if target not in index_of:
                    index_of[target] = low[target] = counter
                    counter += 1
                    stack.append(target)
                    on_stack.add(target)
                    work.append((target, 0))
                elif target in on_stack:
                    low[node] = min(low[node], low[target])
                continue

            work.pop()
            if low[node] == index_of[node]:
                component: List[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)
            if work:
                parent = work[-1][0]
                if node in on_stack:
                    low[parent] = min(low[parent], low[node])

    return components


def condense(
    adjacency: Mapping[str, Sequence[str]], components: Sequence[Sequence[str]]
) -> Tuple[Dict[int, List[int]], Dict[int, int]]:
    """Build the condensation graph.

    An edge dependency-component -> dependent-component is added once per
    pair of distinct components.

    Returns:
        (successors, in_degree) keyed by component index.
    """
    component_of: Dict[str, int] = {}
    successors: Dict[int, List[int]] = {}
    in_degree: Dict[int, int] = {}
    for idx, members in enumerate(components):
        successors[idx] = []
        in_degree[idx] = 0
        for name in members:
            component_of[name] = idx

    for idx, members in enumerate(components):
        for name in members:
            for dependency in adjacency.get(name, ()):
                dep_idx = component_of.get(dependency)
                if dep_idx is None or dep_idx == idx:
                    continue
                if idx not in successors[dep_idx]:
                    successors[dep_idx].append(idx)
                    in_degree[idx] += 1
    return successors, in_degree


def _topological_components(successors: Dict[int, List[int]], in_degree: Dict[int, int]) -> List[int]:
    """Kahn's algorithm, always taking the smallest ready component index."""
    remaining = dict(in_degree)
    ready = [idx for idx, degree in remaining.items() if degree == 0]
    heapq.heapify(ready)
    ordered: List[int] = []
    while ready:
        idx = heapq.heappop(ready)
        ordered.append(idx)
        for succ in sorted(successors[idx]):
            remaining[succ] -= 1
            if remaining[succ] == 0:
                heapq.heappush(ready, succ)
    return ordered


def order_packages(packages: Sequence[PackageRecord]) -> List[PackageRecord]:
    """Return ``packages`` in installation order.

    Only names and ``requires`` edges are considered. Cycles are not an error.

    Raises:
        InstallOrderError: the sorted output does not contain every input
            package exactly once.
    """
    packages = list(packages)
    logger.info("Sorting %d packages for installation using SCC-based topological sort", len(packages))
    if not packages:
        return []

    with Timer() as timer:
        adjacency = build_adjacency(packages)
        components = find_strongly_connected_components(adjacency)
        successors, in_degree = condense(adjacency, components)
        by_name = {pkg.name: pkg for pkg in packages}

        ordered: List[PackageRecord] = []
        for idx in _topological_components(successors, in_degree):
            for name in sorted(components[idx]):
                ordered.append(by_name[name])

    if len(ordered) != len(packages):
        raise InstallOrderError(len(ordered), len(packages))

    if is_debug_enabled(logger):
        logger.debug("--- Final Installation Order ---")
        for position, pkg in enumerate(ordered, start=1):
            logger.debug("[%d]: %s", position, pkg.name)
        logger.debug(
            "--------------------------------",
            extra=extra_context(
                event="function_exit", component="sorter", action="order_packages",
                outcome="success", count=len(ordered), duration_ms=timer.duration_ms(),
            ),
        )
    return ordered


class InstallOrderSorter:  # pylint: disable=too-few-public-methods
    """Object wrapper around order_packages() for callers that inject collaborators."""

    def order(self, packages: Sequence[PackageRecord]) -> List[PackageRecord]:
        """See order_packages()."""
        return order_packages(packages)
