"""Abstract dependency provider and shared selection heuristic."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple, Union

from versioning.ranges import Range
from versioning.version import Version


class Unknown:
    """Sentinel type: a version's dependencies cannot be determined."""

    _instance: Optional["Unknown"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __bool__(self) -> bool:
        return False


UNKNOWN = Unknown()

Dependencies = Union[Dict[str, Range], Unknown]


class DependencyProvider(ABC):
    """Source of package versions and their dependencies for the resolver.

    Calls happen one at a time from the solver thread; implementations may
    block on I/O.
    """

    @abstractmethod
    def choose_version(
        self, candidates: Sequence[Tuple[str, Range]]
    ) -> Tuple[str, Optional[Version]]:
        """Pick the next package to decide among `candidates` and a version for it.

        Args:
            candidates: Non-empty sequence of (package, allowed range) pairs.

        Returns:
            The chosen package and a version inside its range, or None when
            no version satisfies the range.
        """

    @abstractmethod
    def dependencies_of(self, package: str, version: Version) -> Dependencies:
        """Return the dependency constraint set of one release, or UNKNOWN."""


def choose_package_with_fewest_versions(
    list_versions: Callable[[str], Iterable[Version]],
    candidates: Sequence[Tuple[str, Range]],
) -> Tuple[str, Optional[Version]]:
    """Fewest-candidates-first heuristic shared by the concrete providers.

    Picks the package with the fewest versions inside its range (the first
    one in candidate order on ties) and returns the newest such version.
    """
    if not candidates:
        raise ValueError("choose_version needs at least one candidate")

    best_package = None
    best_versions = None
    for package, range_ in candidates:
        matching = range_.filter(list_versions(package))
        if best_versions is None or len(matching) < len(best_versions):
            best_package, best_versions = package, matching
    return best_package, max(best_versions) if best_versions else None
