"""Terms: positive or negative statements about one package's version."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from versioning.ranges import Range
from versioning.version import Version


class Relation(Enum):
    """How a set of assignments relates to a term."""
    SATISFIED = "satisfied"
    CONTRADICTED = "contradicted"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class Term:
    """A positive term reads "selected, at a version in `constraint`".

    A negative term reads "not selected, or selected outside `constraint`",
    so unlike a positive one it also holds when the package is absent.
    """

    positive: bool
    constraint: Range

    @classmethod
    def any(cls) -> "Term":
        """Holds for every outcome, including absence."""
        return cls(False, Range.none())

    @classmethod
    def empty(cls) -> "Term":
        """Holds for no outcome."""
        return cls(True, Range.none())

    @classmethod
    def exact(cls, version: Version) -> "Term":
        return cls(True, Range.exact(version))

    def negate(self) -> "Term":
        return Term(not self.positive, self.constraint)

    def contains(self, version: Version) -> bool:
        return self.constraint.contains(version) == self.positive

    def intersection(self, other: "Term") -> "Term":
        if self.positive and other.positive:
            return Term(True, self.constraint.intersection(other.constraint))
        if self.positive:
            return Term(True, self.constraint.intersection(other.constraint.negate()))
        if other.positive:
            return Term(True, self.constraint.negate().intersection(other.constraint))
        return Term(False, self.constraint.union(other.constraint))

    def union(self, other: "Term") -> "Term":
        return self.negate().intersection(other.negate()).negate()

    def is_subset_of(self, other: "Term") -> bool:
        return self.intersection(other) == self

    def is_disjoint(self, other: "Term") -> bool:
        return self.intersection(other) == Term.empty()

    def relation(self, other: "Term") -> Relation:
        """Relation of this (accumulated) term to `other`."""
        intersection = self.intersection(other)
        if intersection == self:
            return Relation.SATISFIED
        if intersection == Term.empty():
            return Relation.CONTRADICTED
        return Relation.INCONCLUSIVE

    def __str__(self) -> str:
        if self.positive:
            return str(self.constraint)
        return f"not {self.constraint}"
