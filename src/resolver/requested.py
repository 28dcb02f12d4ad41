"""Turn user-facing package selectors into exact catalog entries.

Selectors come from image templates and the command line, and may be a bare
name (``acl``), a ``name_version`` pair with or without epoch
(``qemu-system_3:9.1.0``), a ``.deb`` file stem (``acct_6.6.4-5+b1_amd64``) or a
virtual package name.
"""
from __future__ import annotations

import logging
import posixpath
from typing import Iterable, List, Optional

from .models import PackageRecord
from .priority import PriorityPolicy

logger = logging.getLogger(__name__)


def _strip_epoch(version: str) -> str:
    return version.split(":", 1)[1] if ":" in version else version


def _matches(want: str, pkg: PackageRecord) -> bool:
    # pylint: disable=too-many-return-statements
    if pkg.name == want:
        return True
    if pkg.name.startswith(want + "-") and "-" in want:
        if want.rsplit("-", 1)[1] in pkg.version:
            return True
    if pkg.name.startswith(want + ".") or pkg.name.startswith(want + "_"):
        return True
    if "_" in want:
        name, version = want.split("_", 1)
        if pkg.name == name:
            if ":" in want and pkg.version == version:
                return True
            if ":" not in want and _strip_epoch(pkg.version) == version:
                return True
    return want in pkg.provides


def find_requested_candidates(want: str, catalog: Iterable[PackageRecord]) -> List[PackageRecord]:
    """Every catalog entry the selector ``want`` can refer to, in catalog order.

    A package whose file name is exactly ``want + ".deb"`` ends the scan.
    """
    candidates: List[PackageRecord] = []
    for pkg in catalog:
        if pkg.origin_url and posixpath.basename(pkg.origin_url) == want + ".deb":
            candidates.append(pkg)
            break
        if _matches(want, pkg):
            candidates.append(pkg)
    return candidates


def match_requested(
    want: str, catalog: Iterable[PackageRecord], policy: Optional[PriorityPolicy] = None
) -> Optional[PackageRecord]:
    """Best catalog entry for the selector ``want``.

    Candidates from blocked repositories are dropped; the rest are ranked by
    the priority policy (tier, priority, then highest version).

    Returns:
        The chosen PackageRecord, or None when nothing usable matches.
    """
    policy = policy if policy is not None else PriorityPolicy()
    candidates = policy.sort_candidates(find_requested_candidates(want, catalog))
    if not candidates:
        logger.debug("No catalog entry matches selector %r", want)
        return None
    return candidates[0]
