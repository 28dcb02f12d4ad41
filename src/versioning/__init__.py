"""Debian version ordering and dependency-expression parsing."""

from .debian import DebianVersion, compare_versions, parse_version, sort_versions, version_key
from .models import DependencyAlternative, DependencyClause, Relation, VersionConstraint
from .parser import (
    clean_name,
    constraint_satisfied,
    direct_constraints,
    extract_constraints,
    parse_clause,
    satisfies_all,
)

__all__ = [
    "DebianVersion",
    "compare_versions",
    "parse_version",
    "sort_versions",
    "version_key",
    "DependencyAlternative",
    "DependencyClause",
    "Relation",
    "VersionConstraint",
    "clean_name",
    "constraint_satisfied",
    "direct_constraints",
    "extract_constraints",
    "parse_clause",
    "satisfies_all",
]
