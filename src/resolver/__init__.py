"""Dependency resolution and installation ordering for Debian package sets.

- models.py: catalog records and repository priority configuration
- priority.py: APT-style pin priorities and candidate ranking
- candidates.py: candidate discovery and per-dependency selection
- closure.py: breadth-first closure resolution with conflict repair
- ordering.py: cycle-tolerant installation order (Tarjan + Kahn)
- requested.py: selector matching for requested packages
- report.py: dependency-chain report for missing dependencies
"""

from .candidates import CandidateSelector, CatalogIndex, find_candidates
from .closure import ClosureResolver, resolve_dependencies
from .errors import (
    CandidateSelectionError,
    CatalogError,
    ConfigError,
    InstallOrderError,
    MissingDependencyError,
    RequestedPackageNotFoundError,
    ResolutionError,
    VersionConflictError,
)
from .models import Checksum, PackageRecord, PriorityConfig, RepositoryPriorityEntry
from .ordering import InstallOrderSorter, order_packages
from .priority import PriorityPolicy, extract_repo_base
from .report import DependencyChainReport
from .requested import match_requested

__all__ = [
    "CandidateSelector",
    "CatalogIndex",
    "find_candidates",
    "ClosureResolver",
    "resolve_dependencies",
    "CandidateSelectionError",
    "CatalogError",
    "ConfigError",
    "InstallOrderError",
    "MissingDependencyError",
    "RequestedPackageNotFoundError",
    "ResolutionError",
    "VersionConflictError",
    "Checksum",
    "PackageRecord",
    "PriorityConfig",
    "RepositoryPriorityEntry",
    "InstallOrderSorter",
    "order_packages",
    "PriorityPolicy",
    "extract_repo_base",
    "DependencyChainReport",
    "match_requested",
]
