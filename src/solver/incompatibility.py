"""Incompatibilities: sets of terms that must not all hold at once."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from versioning.ranges import Range
from versioning.version import Version

from .term import Term


class Cause(Enum):
    """Why an incompatibility exists."""
    ROOT = "root"
    NO_VERSIONS = "no_versions"
    UNAVAILABLE = "unavailable"
    DEPENDENCY = "dependency"
    CONFLICT = "conflict"


class Incompatibility:
    """An immutable mapping package -> Term plus its cause.

    CONFLICT incompatibilities keep the two incompatibilities they were
    derived from in `causes`.
    """

    __slots__ = ("_terms", "cause", "causes")

    def __init__(self, terms: Dict[str, Term], cause: Cause,
                 causes: Tuple["Incompatibility", ...] = ()):
        self._terms = dict(terms)
        self.cause = cause
        self.causes = causes

    @classmethod
    def not_root(cls, package: str, version: Version) -> "Incompatibility":
        """The root package must be selected at its own version."""
        return cls({package: Term(False, Range.exact(version))}, Cause.ROOT)

    @classmethod
    def no_versions(cls, package: str, term: Term) -> "Incompatibility":
        """No version of `package` falls inside the positive `term`."""
        return cls({package: term}, Cause.NO_VERSIONS)

    @classmethod
    def unavailable(cls, package: str, version: Version) -> "Incompatibility":
        """This release cannot be used: its dependency set is unsatisfiable."""
        return cls({package: Term.exact(version)}, Cause.UNAVAILABLE)

    @classmethod
    def from_dependency(cls, package: str, version: Version, dependency: str,
                        constraint: Range) -> "Incompatibility":
        """`package` at `version` requires `dependency` inside `constraint`."""
        return cls(
            {package: Term.exact(version), dependency: Term(False, constraint)},
            Cause.DEPENDENCY,
        )

    @classmethod
    def prior_cause(cls, incompatibility: "Incompatibility", satisfier_cause: "Incompatibility",
                    package: str) -> "Incompatibility":
        """Resolve two incompatibilities on `package` into a more general one.

        Terms on other packages are intersected; the terms on `package` are
        unioned and dropped when the union holds for every outcome.
        """
        terms: Dict[str, Term] = {}
        for name, term in incompatibility.items():
            if name != package:
                terms[name] = term
        for name, term in satisfier_cause.items():
            if name == package:
                continue
            terms[name] = terms[name].intersection(term) if name in terms else term

        package_term = incompatibility.get(package).union(satisfier_cause.get(package))
        if package_term != Term.any():
            terms[package] = package_term
        return cls(terms, Cause.CONFLICT, (incompatibility, satisfier_cause))

    def get(self, package: str) -> Optional[Term]:
        return self._terms.get(package)

    def items(self):
        return self._terms.items()

    def packages(self):
        return self._terms.keys()

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def is_terminal(self, root: str, root_version: Version) -> bool:
        """True when this incompatibility proves the root cannot be satisfied."""
        if not self._terms:
            return True
        if len(self._terms) > 1:
            return False
        package, term = next(iter(self._terms.items()))
        return package == root and term.contains(root_version)

    def __str__(self) -> str:
        if self.cause is Cause.ROOT:
            package, term = next(iter(self._terms.items()))
            return f"{package} {term.constraint} is the root package"
        if self.cause is Cause.NO_VERSIONS:
            package, term = next(iter(self._terms.items()))
            return f"no versions of {package} match {term}"
        if self.cause is Cause.UNAVAILABLE:
            package, term = next(iter(self._terms.items()))
            return f"{package} {term} is unavailable"
        if self.cause is Cause.DEPENDENCY:
            (package, term), (dependency, dep_term) = list(self._terms.items())
            return f"{package} {term} depends on {dependency} {dep_term.constraint}"
        if not self._terms:
            return "version solving failed"
        if len(self._terms) == 1:
            package, term = next(iter(self._terms.items()))
            return f"{package} {term} is forbidden"
        return " and ".join(f"{package} {term}" for package, term in self._terms.items()) + " are incompatible"

    def __repr__(self) -> str:
        terms = ", ".join(f"{package}: {term}" for package, term in self._terms.items())
        return f"Incompatibility({{{terms}}}, {self.cause.value})"
