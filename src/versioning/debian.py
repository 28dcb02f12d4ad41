"""Debian version parsing and ordering.

Ordering follows Debian Policy 5.6.12 and is delegated to python-debian's
``Version``. Two rules sit on top: an empty version sorts below every other
version, and an epoch that is not a number counts as 0.
"""
from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from debian.debian_support import Version

logger = logging.getLogger(__name__)

_EPOCH_RE = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class DebianVersion:
    """A version string split into its three comparable parts."""
    epoch: int
    upstream: str
    revision: str

    def __str__(self) -> str:
        text = self.upstream
        if self.revision:
            text = f"{text}-{self.revision}"
        if self.epoch:
            text = f"{self.epoch}:{text}"
        return text


def parse_version(version: str) -> DebianVersion:
    """Split a version string into epoch, upstream version and revision.

    The epoch is everything before the first colon (0 when absent or not
    numeric). The revision is everything after the last hyphen of the
    remainder; it is empty when there is no hyphen.

    Args:
        version: Raw Debian version string.

    Returns:
        DebianVersion with the three parts.
    """
    epoch = 0
    rest = version
    if ":" in version:
        head, rest = version.split(":", 1)
        match = _EPOCH_RE.match(head)
        epoch = int(match.group(1)) if match else 0
    if "-" in rest:
        upstream, revision = rest.rsplit("-", 1)
    else:
        upstream, revision = rest, ""
    return DebianVersion(epoch=epoch, upstream=upstream, revision=revision)


@functools.lru_cache(maxsize=None)
def _native(version: str) -> Optional[Version]:
    """python-debian Version for a string, or None when it is not valid."""
    try:
        return Version(str(parse_version(version)))
    except ValueError:
        logger.debug("Unparseable version %r sorts below valid versions", version)
        return None


def compare_versions(a: str, b: str) -> int:
    """Compare two Debian version strings.

    Empty versions sort below every non-empty version; two empty versions are
    equal. Strings python-debian rejects sort below every valid version and
    among themselves by plain string order.

    Args:
        a: Left-hand version.
        b: Right-hand version.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.
    """
    if a == b:
        return 0
    if not a:
        return -1
    if not b:
        return 1

    va = _native(a)
    vb = _native(b)
    if va is None or vb is None:
        if va is not None:
            return 1
        if vb is not None:
            return -1
        return -1 if a < b else 1
    if va < vb:
        return -1
    if va > vb:
        return 1
    return 0


version_key = functools.cmp_to_key(compare_versions)


def sort_versions(versions: Iterable[str], descending: bool = False) -> List[str]:
    """Return versions ordered by Debian rules."""
    return sorted(versions, key=version_key, reverse=descending)
