"""Candidate discovery and selection for a single dependency."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from versioning.parser import direct_constraints, format_constraints, satisfies_all

from .errors import CandidateSelectionError
from .models import PackageRecord
from .priority import PriorityPolicy

logger = logging.getLogger(__name__)


class CatalogIndex:
    """Name and ``Provides`` lookup tables over a read-only catalog.

    Lists keep catalog order so that selection stays deterministic.
    """

    def __init__(self, catalog: Iterable[PackageRecord]):
        self.packages: Tuple[PackageRecord, ...] = tuple(catalog)
        self._by_name: Dict[str, List[PackageRecord]] = {}
        self._by_provides: Dict[str, List[PackageRecord]] = {}
        for pkg in self.packages:
            self._by_name.setdefault(pkg.name, []).append(pkg)
            for provided in pkg.provides:
                self._by_provides.setdefault(provided, []).append(pkg)

    def by_name(self, name: str) -> List[PackageRecord]:
        """Entries named exactly ``name``."""
        return list(self._by_name.get(name, ()))

    def providers(self, name: str) -> List[PackageRecord]:
        """Entries listing ``name`` in their ``Provides``."""
        return list(self._by_provides.get(name, ()))

    def __iter__(self) -> Iterator[PackageRecord]:
        return iter(self.packages)

    def __len__(self) -> int:
        return len(self.packages)


def find_candidates(dependency_name: str, catalog: Iterable[PackageRecord]) -> List[PackageRecord]:
    """Catalog entries that can satisfy ``dependency_name``, unfiltered.

    Exact name matches win; ``Provides`` entries are only consulted when no
    package carries the name itself.
    """
    index = catalog if isinstance(catalog, CatalogIndex) else CatalogIndex(catalog)
    matches = index.by_name(dependency_name)
    if matches:
        return matches
    return index.providers(dependency_name)


class CandidateSelector:
    """Pick the package that satisfies a dependency of a given parent."""

    def __init__(self, policy: PriorityPolicy):
        self.policy = policy

    def select(self, dependency_name: str, catalog: Iterable[PackageRecord]) -> List[PackageRecord]:
        """Unblocked candidates for ``dependency_name``, best first."""
        return self.policy.sort_candidates(find_candidates(dependency_name, catalog))

    def _pick(self, parent: PackageRecord, same: Sequence[PackageRecord],
              other: Sequence[PackageRecord]) -> PackageRecord:
        if same and other:
            chosen = same[0] if self.policy.prefer(same[0], other[0]) else other[0]
        elif same:
            chosen = same[0]
        else:
            chosen = other[0]
        if is_debug_enabled(logger):
            logger.debug(
                "Selected %s for %s (same-repo=%d, other-repo=%d)",
                chosen.label, parent.label, len(same), len(other),
                extra=extra_context(
                    event="decision", component="resolver", action="resolve_one",
                    outcome="selected", package=chosen.label,
                ),
            )
        return chosen

    def resolve_one(self, parent: PackageRecord, candidates: Sequence[PackageRecord]) -> PackageRecord:
        """Choose one candidate for a dependency of ``parent``.

        When ``parent`` places a direct version constraint on the candidates'
        name, only satisfying candidates are considered. Candidates are split
        into those from the parent's repository context and the rest; if both
        groups are non-empty their best members are compared with the
        priority policy, otherwise the best member of the non-empty group wins.

        Args:
            parent: The requiring package.
            candidates: Candidates as returned by select().

        Returns:
            The chosen PackageRecord.

        Raises:
            CandidateSelectionError: when nothing can be chosen.
        """
        if not candidates:
            raise CandidateSelectionError("", "no candidates provided for selection")
        dependency_name = candidates[0].name
        candidates = self.policy.sort_candidates(candidates)
        if not candidates:
            raise CandidateSelectionError(
                dependency_name, "all candidates are blocked by negative priority"
            )
        dependency_name = candidates[0].name

        constraints, has_constraint = direct_constraints(
            parent.requires_raw, parent.requires, dependency_name
        )
        if has_constraint:
            satisfying = [c for c in candidates if satisfies_all(c.version, constraints)]
            same, other = self.policy.partition_by_repository(parent, satisfying)
            if not same and not other:
                raise CandidateSelectionError(
                    dependency_name,
                    f"no candidates satisfy version constraints: {format_constraints(constraints)}",
                )
            return self._pick(parent, same, other)

        if len(candidates) == 1:
            return candidates[0]
        same, other = self.policy.partition_by_repository(parent, candidates)
        return self._pick(parent, same, other)
