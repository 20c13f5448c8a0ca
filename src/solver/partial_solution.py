"""The partial solution: ordered assignments made so far."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from errors import ProviderError
from versioning.ranges import Range
from versioning.version import Version

from .incompatibility import Incompatibility
from .term import Relation, Term


class IncompatibilityRelation(Enum):
    """How the partial solution relates to a whole incompatibility."""
    SATISFIED = "satisfied"
    ALMOST_SATISFIED = "almost_satisfied"
    CONTRADICTED = "contradicted"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class Assignment:
    """A decision (cause is None) or a derivation (cause set)."""

    package: str
    term: Term
    decision_level: int
    index: int
    cause: Optional[Incompatibility] = None

    @property
    def is_decision(self) -> bool:
        return self.cause is None


class PartialSolution:
    """Append-only list of assignments with per-package accumulated terms."""

    def __init__(self):
        self._assignments: List[Assignment] = []
        self._by_package: Dict[str, List[Assignment]] = {}
        self._terms: Dict[str, Term] = {}
        self._decisions: Dict[str, Version] = {}
        self.decision_level = 0

    def __len__(self) -> int:
        return len(self._assignments)

    @property
    def assignments(self) -> Tuple[Assignment, ...]:
        return tuple(self._assignments)

    def term_for(self, package: str) -> Optional[Term]:
        """Intersection of every assignment on `package`, or None."""
        return self._terms.get(package)

    def is_decided(self, package: str) -> bool:
        return package in self._decisions

    def decide(self, package: str, version: Version) -> Assignment:
        """Select `version` for `package` at a new decision level.

        Raises:
            ProviderError: the version lies outside what was derived for the package.
        """
        term = self._terms.get(package)
        if term is not None and not term.contains(version):
            raise ProviderError(package, f"chosen version is outside the allowed range {term}", str(version))
        self.decision_level += 1
        self._decisions[package] = version
        return self._assign(package, Term.exact(version), None)

    def derive(self, package: str, term: Term, cause: Incompatibility) -> Assignment:
        return self._assign(package, term, cause)

    def _assign(self, package: str, term: Term, cause: Optional[Incompatibility]) -> Assignment:
        assignment = Assignment(package, term, self.decision_level, len(self._assignments), cause)
        self._assignments.append(assignment)
        self._by_package.setdefault(package, []).append(assignment)
        current = self._terms.get(package)
        self._terms[package] = term if current is None else current.intersection(term)
        return assignment

    def backtrack(self, decision_level: int) -> None:
        """Drop every assignment made above `decision_level`."""
        kept = [a for a in self._assignments if a.decision_level <= decision_level]
        decisions = self._decisions
        self._assignments = []
        self._by_package = {}
        self._terms = {}
        self._decisions = {}
        self.decision_level = decision_level
        for assignment in kept:
            self._assignments.append(assignment)
            self._by_package.setdefault(assignment.package, []).append(assignment)
            current = self._terms.get(assignment.package)
            self._terms[assignment.package] = (
                assignment.term if current is None else current.intersection(assignment.term)
            )
            if assignment.is_decision:
                self._decisions[assignment.package] = decisions[assignment.package]

    def relation(self, incompatibility: Incompatibility) -> Tuple[IncompatibilityRelation, Optional[str]]:
        """Classify `incompatibility` against the current assignments.

        Returns the relation and, for CONTRADICTED or ALMOST_SATISFIED, the
        package responsible.
        """
        inconclusive = None
        for package, term in incompatibility.items():
            accumulated = self._terms.get(package, Term.any())
            relation = accumulated.relation(term)
            if relation is Relation.CONTRADICTED:
                return IncompatibilityRelation.CONTRADICTED, package
            if relation is Relation.INCONCLUSIVE:
                if inconclusive is not None:
                    return IncompatibilityRelation.INCONCLUSIVE, None
                inconclusive = package
        if inconclusive is None:
            return IncompatibilityRelation.SATISFIED, None
        return IncompatibilityRelation.ALMOST_SATISFIED, inconclusive

    def satisfies(self, package: str, term: Term) -> bool:
        """Whether the assignments on `package` alone imply `term`."""
        return self._terms.get(package, Term.any()).is_subset_of(term)

    def satisfier(self, package: str, term: Term, start: Optional[Term] = None) -> Optional[Assignment]:
        """Earliest assignment on `package` after which `term` is implied.

        With `start`, that term is intersected in up front; None is returned
        when `start` alone already implies `term`.

        Raises:
            LookupError: the assignments never imply `term`.
        """
        accumulated = start if start is not None else Term.any()
        if start is not None and accumulated.is_subset_of(term):
            return None
        for assignment in self._by_package.get(package, ()):
            accumulated = accumulated.intersection(assignment.term)
            if accumulated.is_subset_of(term):
                return assignment
        raise LookupError(f"{package} {term} is not satisfied by the partial solution")

    def unsatisfied(self) -> List[Tuple[str, Range]]:
        """Packages required by a positive term but not decided yet."""
        return [
            (package, term.constraint)
            for package, term in self._terms.items()
            if term.positive and package not in self._decisions
        ]

    def solution(self) -> Dict[str, Version]:
        return dict(self._decisions)
