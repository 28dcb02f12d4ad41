"""APT-style repository pin priorities.

A package inherits the pin priority of the repository it is served from. The
repository is identified by its base URL, the part of the package URL that
precedes the ``/pool/`` segment of a Debian archive. Priorities map onto five
tiers, checked in this order when two candidates are compared:

- blocked (priority < 0): never selected
- force-install (priority > 1000)
- install-even-if-lower (priority == 1000)
- preferred (priority == 990)
- default (anything else; unset/0 counts as 500)
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from constants import Constants, PriorityTier
from versioning.debian import version_key

from .models import PackageRecord, PriorityConfig, RepositoryPriorityEntry

logger = logging.getLogger(__name__)

_TIER_RANK = {tier: rank for rank, tier in enumerate(PriorityTier)}


def extract_repo_base(url: str) -> Optional[str]:
    """Return the repository base of a package URL.

    ``http://deb.example.org/debian/pool/main/a/acl/acl_2.3.1-3_amd64.deb``
    becomes ``http://deb.example.org/debian``.

    Returns:
        The base without trailing slash, or None when the URL has no pool segment.
    """
    if not url:
        return None
    parsed = urlparse(url)
    path = parsed.path
    if Constants.POOL_SEGMENT not in path:
        return None
    prefix = path.split(Constants.POOL_SEGMENT, 1)[0].rstrip("/")
    if not parsed.scheme:
        return prefix
    return f"{parsed.scheme}://{parsed.netloc}{prefix}"


def classify(priority: int) -> PriorityTier:
    """Map a numeric pin priority to its tier."""
    if priority < 0:
        return PriorityTier.BLOCKED
    if priority > Constants.PRIORITY_INSTALL_EVEN_IF_LOWER:
        return PriorityTier.FORCE_INSTALL
    if priority == Constants.PRIORITY_INSTALL_EVEN_IF_LOWER:
        return PriorityTier.INSTALL_EVEN_IF_LOWER
    if priority == Constants.PRIORITY_PREFERRED:
        return PriorityTier.PREFERRED
    return PriorityTier.DEFAULT


class PriorityPolicy:
    """Priority lookups and candidate ordering for one configuration.

    The configuration is fixed at construction; instances hold no other state
    and can be shared between concurrent resolutions.
    """

    def __init__(self, config: Optional[PriorityConfig] = None):
        self.config = config if config is not None else PriorityConfig()

    @classmethod
    def from_entries(cls, entries: Iterable[RepositoryPriorityEntry]) -> "PriorityPolicy":
        """Shortcut building the policy from bare entries."""
        return cls(PriorityConfig.from_entries(entries))

    def priority_for(self, origin_url: str) -> int:
        """Configured priority of the repository serving ``origin_url``.

        Returns 0 when the repository base cannot be derived or is not
        configured.
        """
        base = extract_repo_base(origin_url)
        if base is None:
            return Constants.UNMATCHED_PRIORITY
        entry = self.config.lookup(base)
        if entry is None:
            return Constants.UNMATCHED_PRIORITY
        return entry.priority

    def effective_priority(self, pkg: PackageRecord) -> int:
        """Numeric priority used for comparisons; unset (0) counts as 500."""
        priority = self.priority_for(pkg.origin_url)
        return priority if priority != 0 else Constants.DEFAULT_PRIORITY

    def tier_of(self, pkg: PackageRecord) -> PriorityTier:
        """Tier of the repository serving ``pkg``."""
        return classify(self.priority_for(pkg.origin_url))

    def is_blocked(self, pkg: PackageRecord) -> bool:
        """Priority below zero: the package must never be selected."""
        return self.tier_of(pkg) is PriorityTier.BLOCKED

    def is_force_install(self, pkg: PackageRecord) -> bool:
        """Priority above 1000."""
        return self.tier_of(pkg) is PriorityTier.FORCE_INSTALL

    def is_install_even_if_lower(self, pkg: PackageRecord) -> bool:
        """Priority exactly 1000."""
        return self.tier_of(pkg) is PriorityTier.INSTALL_EVEN_IF_LOWER

    def is_preferred(self, pkg: PackageRecord) -> bool:
        """Priority exactly 990."""
        return self.tier_of(pkg) is PriorityTier.PREFERRED

    def filter_blocked(self, candidates: Iterable[PackageRecord]) -> List[PackageRecord]:
        """Drop candidates served from blocked repositories."""
        kept = []
        for pkg in candidates:
            if self.is_blocked(pkg):
                logger.debug("Skipping %s: repository priority is negative", pkg.label)
                continue
            kept.append(pkg)
        return kept

    def sort_candidates(self, candidates: Iterable[PackageRecord]) -> List[PackageRecord]:
        """Filter blocked candidates and order the rest best-first.

        Order: tier (force-install, install-even-if-lower, preferred, default),
        then numeric priority descending, then version descending. Ties keep
        their input order.
        """
        kept = self.filter_blocked(candidates)
        kept.sort(key=lambda p: version_key(p.version), reverse=True)
        kept.sort(key=lambda p: (_TIER_RANK[self.tier_of(p)], -self.effective_priority(p)))
        return kept

    def prefer(self, pkg_a: PackageRecord, pkg_b: PackageRecord) -> bool:
        """Return True when ``pkg_a`` should be chosen over ``pkg_b``.

        Tiers decide first. Within a tier the higher numeric priority wins and
        equal priorities fall back to the higher version, except at exactly
        1000 where ``pkg_a`` is accepted without comparing versions.
        """
        if self.is_blocked(pkg_a):
            return False
        if self.is_blocked(pkg_b):
            return True

        force_a, force_b = self.is_force_install(pkg_a), self.is_force_install(pkg_b)
        if force_a != force_b:
            return force_a

        lower_a, lower_b = self.is_install_even_if_lower(pkg_a), self.is_install_even_if_lower(pkg_b)
        if lower_a and not lower_b and not force_b:
            return True
        if lower_b and not lower_a and not force_a:
            return False

        pref_a, pref_b = self.is_preferred(pkg_a), self.is_preferred(pkg_b)
        if pref_a and not pref_b and not lower_b and not force_b:
            return True
        if pref_b and not pref_a and not lower_a and not force_a:
            return False

        priority_a = self.effective_priority(pkg_a)
        priority_b = self.effective_priority(pkg_b)
        if priority_a == priority_b:
            if priority_a == Constants.PRIORITY_INSTALL_EVEN_IF_LOWER:
                return True
            return version_key(pkg_a.version) > version_key(pkg_b.version)
        return priority_a > priority_b

    def repository_context(self, parent: PackageRecord) -> Tuple[str, ...]:
        """Repository bases that count as "the same repository" as ``parent``.

        When the parent comes from one of the configured repositories, every
        configured repository qualifies; otherwise only the parent's own.
        """
        parent_base = extract_repo_base(parent.origin_url)
        if parent_base is None:
            return ()
        configured = self.config.repository_bases
        if parent_base in configured:
            return configured
        return (parent_base,)

    def partition_by_repository(
        self, parent: PackageRecord, candidates: Iterable[PackageRecord]
    ) -> Tuple[List[PackageRecord], List[PackageRecord]]:
        """Split candidates into (same repository as parent, other repositories)."""
        context = self.repository_context(parent)
        same: List[PackageRecord] = []
        other: List[PackageRecord] = []
        for candidate in candidates:
            base = extract_repo_base(candidate.origin_url)
            if base is not None and base in context:
                same.append(candidate)
            else:
                other.append(candidate)
        return same, other
