"""Dependency-chain report produced when dependencies are missing.

The resolver records every parent -> child edge it walks. When a dependency
cannot be satisfied, the child is recorded as ``name(missing)``. The report
traces each missing leaf back to a requested package so the whole path that
pulled the gap in is visible, e.g. ``app_1.0 -> libfoo_2.1 -> libbar(missing)``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from constants import Constants

Edge = Tuple[str, str]
ReportSink = Callable[["DependencyChainReport"], Optional[str]]


def missing_label(dependency_name: str) -> str:
    """Child label used for an unsatisfied dependency."""
    return f"{dependency_name}{Constants.MISSING_MARKER}"


def build_dependency_chains(edges: Sequence[Edge]) -> List[Tuple[str, ...]]:
    """Trace every missing leaf back to a root.

    The first recorded parent of a node is the one followed, which matches the
    breadth-first discovery order of the resolver.
    """
    first_parent: Dict[str, str] = {}
    for parent, child in edges:
        first_parent.setdefault(child, parent)

    chains: List[Tuple[str, ...]] = []
    seen_chains = set()
    for parent, child in edges:
        if not child.endswith(Constants.MISSING_MARKER):
            continue
        chain = [child, parent]
        visited = {child, parent}
        node = parent
        while node in first_parent:
            node = first_parent[node]
            if node in visited:
                break
            visited.add(node)
            chain.append(node)
        chain.reverse()
        key = tuple(chain)
        if key not in seen_chains:
            seen_chains.add(key)
            chains.append(key)
    return chains


@dataclass
class DependencyChainReport:
    """Edges walked during resolution and the chains leading to missing packages."""
    edges: Tuple[Edge, ...] = ()
    chains: Tuple[Tuple[str, ...], ...] = ()
    location: Optional[str] = None
    missing: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_edges(cls, edges: Sequence[Edge]) -> "DependencyChainReport":
        """Build the report from the resolver's recorded edges."""
        chains = build_dependency_chains(edges)
        missing = tuple(sorted({
            child[: -len(Constants.MISSING_MARKER)]
            for _, child in edges
            if child.endswith(Constants.MISSING_MARKER)
        }))
        return cls(edges=tuple(edges), chains=tuple(chains), missing=missing)

    def render(self) -> str:
        """One chain per line, ``a -> b -> c(missing)``."""
        return "\n".join(" -> ".join(chain) for chain in self.chains) + ("\n" if self.chains else "")
