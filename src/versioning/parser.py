"""Dependency expression parsing utilities.

A raw ``Depends`` clause such as ``"logsave | e2fsprogs (<< 1.45.3-1~)"`` is
tokenized into a DependencyClause: one DependencyAlternative per ``|`` branch,
each with a bare name, an optional architecture qualifier and its version
relations. Everything the resolver needs (clean names, version constraints,
alternative names) is derived from that structure.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from constants import Constants
from .debian import compare_versions
from .models import DependencyAlternative, DependencyClause, Relation, VersionConstraint

logger = logging.getLogger(__name__)

# name, then optional ":arch", then optional "(relations)"; anything after is ignored
_ALTERNATIVE_RE = re.compile(
    r"""^\s*
    (?P<name>[^\s:(|]*)
    (?::(?P<arch>[^\s(|]*))?
    \s*
    (?:\((?P<relations>[^)]*)\)?)?
    """,
    re.VERBOSE,
)
_RELATION_RE = re.compile(r"^(<<|<=|>=|>>|=|<|>)\s*(\S+)$")


def parse_relation(text: str) -> Optional[Tuple[Relation, str]]:
    """Parse ``">= 1.2"`` or ``">=1.2"`` into (Relation, version).

    Returns:
        The pair, or None when the text is not a recognizable relation.
    """
    parts = text.split()
    if len(parts) == 2 and parts[0] in Constants.VERSION_OPERATORS:
        return Relation.from_token(parts[0]), parts[1]
    match = _RELATION_RE.match(text.strip())
    if not match:
        return None
    return Relation.from_token(match.group(1)), match.group(2)


def parse_alternative(text: str) -> DependencyAlternative:
    """Tokenize one alternative (no ``|`` inside)."""
    match = _ALTERNATIVE_RE.match(text)
    if not match:
        return DependencyAlternative(name="", raw=text.strip())
    relations: List[Tuple[Relation, str]] = []
    group = match.group("relations")
    if group:
        for part in group.split(","):
            parsed = parse_relation(part)
            if parsed is not None:
                relations.append(parsed)
            elif part.strip():
                logger.debug("Ignoring unparsable version relation %r in %r", part.strip(), text.strip())
    return DependencyAlternative(
        name=match.group("name"),
        arch=match.group("arch") or None,
        relations=tuple(relations),
        raw=text.strip(),
    )


def parse_clause(raw: str) -> DependencyClause:
    """Tokenize a full dependency clause into its alternatives."""
    raw = raw.strip()
    alternatives = tuple(parse_alternative(part) for part in raw.split("|"))
    return DependencyClause(alternatives=alternatives, raw=raw)


def clean_name(dep: str) -> str:
    """Return the bare package name of a dependency expression.

    Keeps the first alternative and drops the architecture qualifier and any
    version restriction.

    >>> clean_name("libc6 (>= 2.34)")
    'libc6'
    >>> clean_name("python3 | python3-dev")
    'python3'
    >>> clean_name("gcc:amd64")
    'gcc'
    """
    return parse_clause(dep).name


def split_dependency_field(value: str) -> List[str]:
    """Split a comma-separated control field into stripped, non-empty clauses."""
    return [clause.strip() for clause in value.split(",") if clause.strip()]


def extract_constraints(raw_clauses: Iterable[str], dep_name: str) -> Tuple[List[VersionConstraint], bool]:
    """Collect the version constraints the raw clauses place on ``dep_name``.

    Every alternative whose name equals ``dep_name`` contributes one constraint
    per version relation, each remembering the other alternatives of its clause.
    An unversioned match inside a multi-alternative clause still contributes a
    constraint carrying only the alternatives.

    Args:
        raw_clauses: Raw ``Depends`` clauses of the requiring package.
        dep_name: Cleaned dependency name to look for.

    Returns:
        (constraints, found) where found is True when ``dep_name`` appears in
        any clause.
    """
    constraints: List[VersionConstraint] = []
    found = False
    for raw in raw_clauses:
        clause = parse_clause(raw)
        for index, alt in enumerate(clause.alternatives):
            if alt.name != dep_name:
                continue
            found = True
            others = "|".join(
                other.name for pos, other in enumerate(clause.alternatives) if pos != index
            )
            if alt.relations:
                for relation, version in alt.relations:
                    constraints.append(VersionConstraint(relation, version, others))
            elif "(" not in alt.raw and len(clause.alternatives) > 1:
                constraints.append(VersionConstraint(alternative_names=others))
    return constraints, found


def has_direct_dependency(requires: Iterable[str], dep_name: str) -> bool:
    """True when ``dep_name`` is one of the cleaned requirement names."""
    return any(clean_name(req) == dep_name for req in requires)


def direct_constraints(
    raw_clauses: Sequence[str], requires: Sequence[str], dep_name: str
) -> Tuple[List[VersionConstraint], bool]:
    """Constraints on ``dep_name``, minus alternative-only ones for direct requirements.

    A package that requires ``dep_name`` directly is not bound by a relation
    that only appears inside an alternative clause.

    Returns:
        (constraints, has_constraint)
    """
    constraints, found = extract_constraints(raw_clauses, dep_name)
    if found and has_direct_dependency(requires, dep_name):
        constraints = [c for c in constraints if not c.alternative_names]
        return constraints, bool(constraints)
    return constraints, found


def constraint_satisfied(version: str, constraint: VersionConstraint) -> bool:
    """Evaluate one constraint against a concrete version.

    A constraint without a relation is always satisfied.
    """
    if not constraint.is_versioned:
        return True
    cmp = compare_versions(version, constraint.version)
    relation = constraint.relation
    if relation is Relation.EQ:
        return cmp == 0
    if relation is Relation.LT:
        return cmp < 0
    if relation is Relation.LE:
        return cmp <= 0
    if relation is Relation.GT:
        return cmp > 0
    return cmp >= 0


def satisfies_all(version: str, constraints: Iterable[VersionConstraint]) -> bool:
    """True when ``version`` satisfies every constraint."""
    return all(constraint_satisfied(version, c) for c in constraints)


def format_constraints(constraints: Iterable[VersionConstraint]) -> str:
    """Render constraints for error messages, e.g. ``">=1.2, <<2"``."""
    return ", ".join(str(c) for c in constraints)
