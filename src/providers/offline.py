"""In-memory provider over a fixed dependency graph."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from packaging.utils import canonicalize_name

from errors import SpecifierSyntaxError
from versioning.ranges import Range
from versioning.specifiers import parse_dependency, parse_specifiers
from versioning.version import Version

from .base import UNKNOWN, Dependencies, DependencyProvider, choose_package_with_fewest_versions

logger = logging.getLogger(__name__)

DependencyInput = Union[Mapping[str, Union[Range, str]], Iterable[str]]


class OfflineDependencyProvider(DependencyProvider):
    """Provider backed by a graph declared up front.

    Packages and versions never added are unknown: they list no versions,
    and asking for their dependencies returns UNKNOWN.
    """

    def __init__(self):
        self._graph: Dict[str, Dict[Version, Dict[str, Range]]] = {}

    def add_dependencies(self, package: str, version: Union[Version, str], dependencies: DependencyInput = ()) -> None:
        """Register a release and its dependencies.

        Args:
            package: Package name.
            version: A Version or a version string.
            dependencies: Either a mapping name -> Range/specifier text, or an
                iterable of requirement lines such as ``"b (>=1.0)"``.
        """
        if isinstance(version, str):
            version = Version.parse(version)
        releases = self._graph.setdefault(canonicalize_name(package), {})
        releases[version] = self._constraints(dependencies)

    @staticmethod
    def _constraints(dependencies: DependencyInput) -> Dict[str, Range]:
        constraints: Dict[str, Range] = {}
        if isinstance(dependencies, Mapping):
            for name, spec in dependencies.items():
                range_ = spec if isinstance(spec, Range) else parse_specifiers(spec)
                key = canonicalize_name(name)
                constraints[key] = constraints[key].intersection(range_) if key in constraints else range_
            return constraints
        if isinstance(dependencies, str):
            raise SpecifierSyntaxError(dependencies, "expected a list of requirements, got a single string")
        for line in dependencies:
            parsed = parse_dependency(line)
            if parsed is None:
                continue
            name, range_ = parsed
            constraints[name] = constraints[name].intersection(range_) if name in constraints else range_
        return constraints

    def packages(self) -> List[str]:
        return list(self._graph)

    def versions(self, package: str) -> List[Version]:
        """Known versions of a package, ascending."""
        return sorted(self._graph.get(canonicalize_name(package), {}))

    def choose_version(self, candidates: Sequence[Tuple[str, Range]]) -> Tuple[str, Optional[Version]]:
        return choose_package_with_fewest_versions(self.versions, candidates)

    def dependencies_of(self, package: str, version: Version) -> Dependencies:
        releases = self._graph.get(canonicalize_name(package))
        if releases is None or version not in releases:
            return UNKNOWN
        return dict(releases[version])

    # -- loading ------------------------------------------------------------

    @classmethod
    def from_index(cls, index: Mapping[str, Mapping[str, Any]]) -> "OfflineDependencyProvider":
        """Build a provider from ``{"pkg": {"1.0.0": ["dep (>=1.0)", ...]}}``.

        Each release may also map to ``{"dep": ">=1.0"}`` or to null (no
        dependencies).
        """
        if not isinstance(index, Mapping):
            raise SpecifierSyntaxError(str(type(index).__name__), "index must map package names to releases")
        provider = cls()
        for package, releases in index.items():
            if not isinstance(releases, Mapping):
                raise SpecifierSyntaxError(str(package), "releases must map versions to dependencies")
            for version, dependencies in releases.items():
                provider.add_dependencies(package, version, dependencies or ())
        logger.debug("Loaded offline index with %d packages", len(provider._graph))
        return provider

    @classmethod
    def from_file(cls, path: str) -> "OfflineDependencyProvider":
        """Load a JSON index file (see from_index).

        Raises:
            OSError: the file cannot be read.
            json.JSONDecodeError: the file is not valid JSON.
        """
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_index(json.load(fh))
