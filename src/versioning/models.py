"""Data models for dependency expressions and version constraints."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Relation(Enum):
    """Version relation operators allowed in a dependency clause."""
    EQ = "="
    LT = "<<"
    LE = "<="
    GT = ">>"
    GE = ">="

    @classmethod
    def from_token(cls, token: str) -> "Relation":
        """Map an operator token, including the obsolete single ``<``/``>`` forms."""
        if token == "<":
            return cls.LT
        if token == ">":
            return cls.GT
        return cls(token)


@dataclass(frozen=True)
class VersionConstraint:
    """A relation on one dependency name, derived from a raw clause.

    ``alternative_names`` is the pipe-joined list of the other alternatives of
    the same clause; it is empty for a direct requirement. A constraint with
    no relation only carries alternatives.
    """
    relation: Optional[Relation] = None
    version: str = ""
    alternative_names: str = ""

    @property
    def operator(self) -> str:
        """Operator token, empty when the constraint only carries alternatives."""
        return self.relation.value if self.relation else ""

    @property
    def is_versioned(self) -> bool:
        """True when the constraint restricts the version."""
        return self.relation is not None and bool(self.version)

    @property
    def alternatives(self) -> Tuple[str, ...]:
        """Alternative names as a tuple, in clause order."""
        if not self.alternative_names:
            return ()
        return tuple(n.strip() for n in self.alternative_names.split("|") if n.strip())

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


@dataclass(frozen=True)
class DependencyAlternative:
    """One ``|``-separated alternative of a dependency clause."""
    name: str
    arch: Optional[str] = None
    relations: Tuple[Tuple[Relation, str], ...] = ()
    raw: str = ""


@dataclass(frozen=True)
class DependencyClause:
    """A parsed ``Depends`` clause: one or more alternatives."""
    alternatives: Tuple[DependencyAlternative, ...] = field(default_factory=tuple)
    raw: str = ""

    @property
    def name(self) -> str:
        """Name of the first alternative, the one a cleaned requirement keeps."""
        return self.alternatives[0].name if self.alternatives else ""

    @property
    def names(self) -> Tuple[str, ...]:
        """All alternative names, in clause order."""
        return tuple(alt.name for alt in self.alternatives)
