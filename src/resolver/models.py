"""Data models for catalog entries and repository priority configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from constants import Constants


@dataclass(frozen=True)
class Checksum:
    """A digest published for a package file."""
    algorithm: str
    value: str


@dataclass(frozen=True)
class PackageRecord:
    """One binary package entry of a repository catalog.

    ``requires`` holds cleaned dependency names (graph edges) and
    ``requires_raw`` the unparsed ``Depends`` clauses they came from.
    """
    name: str
    version: str = ""
    architecture: str = ""
    origin_url: str = ""
    requires: Tuple[str, ...] = ()
    requires_raw: Tuple[str, ...] = ()
    provides: Tuple[str, ...] = ()
    checksums: Tuple[Checksum, ...] = ()
    description: str = ""
    maintainer: str = ""

    @property
    def key(self) -> str:
        """``name=version`` lookup key."""
        return f"{self.name}={self.version}"

    @property
    def label(self) -> str:
        """``name_version`` as used in messages and listings."""
        return f"{self.name}_{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view used by the exporters."""
        return {
            "name": self.name,
            "version": self.version,
            "architecture": self.architecture,
            "url": self.origin_url,
            "requires": list(self.requires),
            "provides": list(self.provides),
            "checksums": [{"algorithm": c.algorithm, "value": c.value} for c in self.checksums],
            "description": self.description,
        }


@dataclass(frozen=True)
class RepositoryPriorityEntry:
    """Pin priority for every package served under a repository base URL."""
    repo_base_url_prefix: str
    priority: int = 0

    @property
    def effective_priority(self) -> int:
        """Priority with the unset value (0) mapped to the APT default."""
        return self.priority if self.priority != 0 else Constants.DEFAULT_PRIORITY


@dataclass(frozen=True)
class PriorityConfig:
    """Ordered, immutable list of repository priority entries."""
    entries: Tuple[RepositoryPriorityEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_entries(cls, entries: Iterable[RepositoryPriorityEntry]) -> "PriorityConfig":
        """Build a config from any iterable of entries, keeping their order."""
        return cls(entries=tuple(entries))

    def lookup(self, repo_base: str) -> Optional[RepositoryPriorityEntry]:
        """First entry whose prefix equals ``repo_base``, ignoring trailing slashes."""
        for entry in self.entries:
            if entry.repo_base_url_prefix.rstrip("/") == repo_base.rstrip("/"):
                return entry
        return None

    @property
    def repository_bases(self) -> Tuple[str, ...]:
        """Configured (non-empty) repository base prefixes, in order."""
        return tuple(e.repo_base_url_prefix.rstrip("/") for e in self.entries if e.repo_base_url_prefix)

    def __len__(self) -> int:
        return len(self.entries)
