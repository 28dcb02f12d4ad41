"""Dependency closure resolution.

Starting from exact-version requested packages, a breadth-first worklist pulls
in one provider per dependency name until every requirement is satisfied.
Resolution fails fast on requested packages missing from the catalog and on
version conflicts that no higher-priority candidate can repair; missing
dependencies are collected over the whole pass and reported together.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.models import Relation, VersionConstraint
from versioning.parser import (
    clean_name,
    constraint_satisfied,
    direct_constraints,
    extract_constraints,
    satisfies_all,
)

from .candidates import CandidateSelector, CatalogIndex
from .errors import (
    CandidateSelectionError,
    MissingDependencyError,
    RequestedPackageNotFoundError,
    VersionConflictError,
)
from .models import PackageRecord, PriorityConfig
from .priority import PriorityPolicy
from .report import DependencyChainReport, Edge, ReportSink, missing_label

logger = logging.getLogger(__name__)


class _ClosureState:
    """Mutable bookkeeping for one resolve() call.

    Accepted packages live in an append-only arena; eviction clears the slot's
    live flag instead of splicing the list, and the result is compacted once at
    the end.
    """

    def __init__(self) -> None:
        self.queue: Deque[PackageRecord] = deque()
        self.needed: Set[str] = set()
        self.resolved_deps: Dict[str, PackageRecord] = {}
        self.arena: List[PackageRecord] = []
        self.live: List[bool] = []
        self.slot_by_name: Dict[str, int] = {}
        self.evicted: Set[str] = set()
        self.edges: List[Edge] = []
        self.missing: List[Tuple[PackageRecord, str]] = []

    def enqueue(self, pkg: PackageRecord) -> None:
        self.evicted.discard(pkg.key)
        self.queue.append(pkg)

    def accept(self, pkg: PackageRecord) -> None:
        self.needed.add(pkg.name)
        self.slot_by_name[pkg.name] = len(self.arena)
        self.arena.append(pkg)
        self.live.append(True)

    def evict(self, pkg: PackageRecord) -> None:
        self.needed.discard(pkg.name)
        self.evicted.add(pkg.key)
        slot = self.slot_by_name.get(pkg.name)
        if slot is not None and self.arena[slot] == pkg and self.live[slot]:
            self.live[slot] = False
            del self.slot_by_name[pkg.name]

    def compact(self) -> List[PackageRecord]:
        kept = [pkg for pkg, alive in zip(self.arena, self.live) if alive]
        kept.sort(key=lambda p: p.name)
        return kept


class ClosureResolver:
    """Compute the minimal package closure for a set of requested packages."""

    def __init__(self, policy: Optional[PriorityPolicy] = None, report_sink: Optional[ReportSink] = None):
        """Create a resolver.

        Args:
            policy: Repository priority policy; defaults to an empty configuration.
            report_sink: Optional callable receiving the dependency-chain report
                when dependencies are missing. It may return a location string
                (e.g. a file path) that is attached to the report.
        """
        self.policy = policy if policy is not None else PriorityPolicy()
        self.selector = CandidateSelector(self.policy)
        self.report_sink = report_sink

    def _seed(self, requested: Iterable[PackageRecord], index: CatalogIndex) -> List[PackageRecord]:
        by_key: Dict[str, PackageRecord] = {}
        for pkg in index:
            if pkg.version:
                by_key[pkg.key] = pkg
        seeds = []
        for want in requested:
            match = by_key.get(want.key) if want.version else None
            if match is None:
                raise RequestedPackageNotFoundError(want.name, want.version)
            seeds.append(match)
        return seeds

    @staticmethod
    def _unmet_constraint(
        resolved: PackageRecord, constraints: List[VersionConstraint], state: _ClosureState
    ) -> Optional[VersionConstraint]:
        """First constraint neither the resolved package nor a resolved alternative meets."""
        for constraint in constraints:
            if constraint.is_versioned and constraint_satisfied(resolved.version, constraint):
                continue
            if any(alt in state.resolved_deps for alt in constraint.alternatives):
                continue
            return constraint
        return None

    def _recheck_resolved(
        self,
        current: PackageRecord,
        dep_name: str,
        resolved: PackageRecord,
        index: CatalogIndex,
        state: _ClosureState,
    ) -> None:
        """Verify an already-resolved dependency against ``current``'s constraints.

        Replaces the resolved package when a constraint-satisfying candidate
        outranks it; raises VersionConflictError otherwise.
        """
        constraints, has_constraint = direct_constraints(current.requires_raw, current.requires, dep_name)
        if not has_constraint:
            return
        unmet = self._unmet_constraint(resolved, constraints, state)
        if unmet is None:
            return

        exact = any(c.relation is Relation.EQ for c in constraints)
        candidates = self.selector.select(dep_name, index)
        if candidates and not exact:
            satisfying = [c for c in candidates if satisfies_all(c.version, constraints)]
            if satisfying:
                try:
                    replacement: Optional[PackageRecord] = self.selector.resolve_one(current, satisfying)
                except CandidateSelectionError:
                    replacement = None
                if replacement is not None and self.policy.prefer(replacement, resolved):
                    logger.debug(
                        "replacing %s (priority %d) with higher priority package %s (priority %d)",
                        resolved.label, self.policy.priority_for(resolved.origin_url),
                        replacement.label, self.policy.priority_for(replacement.origin_url),
                        extra=extra_context(
                            event="decision", component="resolver", action="replace",
                            outcome="replaced", package=replacement.label,
                        ),
                    )
                    state.evict(resolved)
                    state.enqueue(replacement)
                    state.resolved_deps[dep_name] = replacement
                    state.edges.append((current.label, replacement.label))
                    return
                logger.debug("new candidate for %s does not have higher priority, cannot replace", dep_name)
        raise VersionConflictError(current, dep_name, unmet.version, resolved)

    def _resolve_alternatives(
        self, current: PackageRecord, dep_name: str, index: CatalogIndex, state: _ClosureState
    ) -> bool:
        """Try the other alternatives of the clauses naming ``dep_name``."""
        constraints, _ = extract_constraints(current.requires_raw, dep_name)
        for constraint in constraints:
            for alt_name in constraint.alternatives:
                alt_candidates = self.selector.select(alt_name, index)
                if not alt_candidates:
                    continue
                try:
                    chosen = self.selector.resolve_one(current, alt_candidates)
                except CandidateSelectionError as exc:
                    logger.warning("Failed to resolve alternative %r for %r: %s", alt_name, dep_name, exc)
                    continue
                logger.info(
                    "Resolved alternative %r version %r for missing dependency %r",
                    alt_name, chosen.version, dep_name,
                )
                state.enqueue(chosen)
                state.resolved_deps[alt_name] = chosen
                state.edges.append((current.label, chosen.label))
                return True
        return False

    def _record_missing(self, current: PackageRecord, dep_name: str, state: _ClosureState) -> None:
        state.missing.append((current, dep_name))
        state.edges.append((current.label, missing_label(dep_name)))

    def _expand(self, current: PackageRecord, index: CatalogIndex, state: _ClosureState) -> None:
        for dep in current.requires:
            dep_name = clean_name(dep)
            if not dep_name:
                continue

            resolved = state.resolved_deps.get(dep_name)
            if resolved is not None:
                self._recheck_resolved(current, dep_name, resolved, index, state)
                continue

            candidates = self.selector.select(dep_name, index)
            if candidates:
                try:
                    chosen = self.selector.resolve_one(current, candidates)
                except CandidateSelectionError as exc:
                    logger.warning(
                        "failed to resolve multiple candidates for dependency %r of package %r: %s",
                        dep_name, current.name, exc,
                    )
                    self._record_missing(current, dep_name, state)
                    continue
                state.enqueue(chosen)
                state.resolved_deps[dep_name] = chosen
                state.edges.append((current.label, chosen.label))
                continue

            if not self._resolve_alternatives(current, dep_name, index, state):
                logger.warning("no candidates found for dependency %r of package %r", dep_name, current.name)
                self._record_missing(current, dep_name, state)

    def resolve(self, requested: Iterable[PackageRecord], catalog: Iterable[PackageRecord]) -> List[PackageRecord]:
        """Return the closure of ``requested`` over ``catalog``, sorted by name.

        Args:
            requested: Exact-version packages to install.
            catalog: Every package available from the configured repositories.

        Returns:
            One PackageRecord per package name, ascending by name.

        Raises:
            RequestedPackageNotFoundError: a requested (name, version) is not in the catalog.
            VersionConflictError: an already-resolved package cannot satisfy a later requirement.
            MissingDependencyError: at least one dependency had no usable candidate.
        """
        index = catalog if isinstance(catalog, CatalogIndex) else CatalogIndex(catalog)
        state = _ClosureState()
        with Timer() as timer:
            state.queue.extend(self._seed(requested, index))
            while state.queue:
                current = state.queue.popleft()
                if current.name in state.needed or current.key in state.evicted:
                    continue
                state.accept(current)
                self._expand(current, index, state)

        if state.missing:
            report = DependencyChainReport.from_edges(state.edges)
            if self.report_sink is not None:
                report.location = self.report_sink(report)
            raise MissingDependencyError(state.missing, report)

        result = state.compact()
        logger.info("Resolved %d packages", len(result))
        if is_debug_enabled(logger):
            logger.debug(
                "Dependency resolution finished",
                extra=extra_context(
                    event="function_exit", component="resolver", action="resolve",
                    outcome="success", count=len(result), duration_ms=timer.duration_ms(),
                ),
            )
        return result


def resolve_dependencies(
    requested: Iterable[PackageRecord],
    catalog: Iterable[PackageRecord],
    config: Optional[PriorityConfig] = None,
    report_sink: Optional[ReportSink] = None,
) -> List[PackageRecord]:
    """Resolve the closure of ``requested`` with a one-off resolver."""
    return ClosureResolver(PriorityPolicy(config), report_sink=report_sink).resolve(requested, catalog)
