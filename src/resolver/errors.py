"""Exceptions raised by dependency resolution and install ordering."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .models import PackageRecord
    from .report import DependencyChainReport


class ResolutionError(Exception):
    """Base class for user-facing resolution failures."""


class RequestedPackageNotFoundError(ResolutionError):
    """A requested package has no exact (name, version) entry in the catalog."""

    def __init__(self, name: str, version: str = ""):
        self.name = name
        self.version = version
        super().__init__(f'requested package "{name}" not in repo listing')


class VersionConflictError(ResolutionError):
    """An already-resolved package violates another package's requirement."""

    def __init__(
        self,
        requirer: "PackageRecord",
        required_name: str,
        required_version: str,
        installed: "PackageRecord",
    ):
        self.requirer = requirer
        self.required_name = required_name
        self.required_version = required_version
        self.installed = installed
        super().__init__(
            f"conflicting package dependencies: {requirer.label} requires "
            f"{required_name}_{required_version}, but {installed.label} is already installed"
        )


class MissingDependencyError(ResolutionError):
    """One or more dependencies could not be satisfied by any candidate.

    ``missing`` lists every (requiring package, dependency name) gap found in
    the resolution pass; ``report`` holds the rendered dependency chains.
    """

    def __init__(
        self,
        missing: Sequence[Tuple["PackageRecord", str]],
        report: Optional["DependencyChainReport"] = None,
    ):
        self.missing: List[Tuple["PackageRecord", str]] = list(missing)
        self.report = report
        names = ", ".join(sorted({dep for _, dep in self.missing}))
        message = f"one or more requested dependencies not found: {names}"
        if report is not None and report.location:
            message += f". See list in {report.location}"
        super().__init__(message)

    @property
    def missing_names(self) -> List[str]:
        """Distinct missing dependency names, sorted."""
        return sorted({dep for _, dep in self.missing})


class CandidateSelectionError(ResolutionError):
    """No single candidate could be chosen for a dependency."""

    def __init__(self, dependency_name: str, reason: str):
        self.dependency_name = dependency_name
        self.reason = reason
        super().__init__(reason)


class InstallOrderError(RuntimeError):
    """The install-order sort lost or duplicated packages (internal bug)."""

    def __init__(self, sorted_count: int, total: int):
        self.sorted_count = sorted_count
        self.total = total
        super().__init__(
            f"failed to sort all packages, {sorted_count} sorted out of {total}. "
            "This may indicate a problem with the dependency graph construction"
        )


class ConfigError(ValueError):
    """The repository priority configuration is unreadable or invalid."""


class CatalogError(ValueError):
    """A package index could not be read or parsed."""
