"""Public entry point: resolve a root project's requirements."""

from __future__ import annotations

import logging
from itertools import chain
from typing import Dict, Iterable, Optional, Tuple

from packaging.utils import canonicalize_name

from providers.base import DependencyProvider
from providers.pypi import PyPIDependencyProvider
from providers.root import RootDependencyProvider
from versioning.ranges import Range
from versioning.specifiers import requirement_pair
from versioning.version import Version

from .resolver import Resolver

logger = logging.getLogger(__name__)

Requirement = Tuple[str, Optional[str]]


def root_dependencies(requirements: Iterable[Requirement],
                      dev_requirements: Iterable[Requirement] = ()) -> Dict[str, Range]:
    """Validate (name, specifiers) pairs into a constraint set.

    Runtime and development requirements are chained; repeated names are
    intersected.

    Raises:
        SpecifierSyntaxError: a name or specifier list is malformed.
    """
    constraints: Dict[str, Range] = {}
    for name, specifiers in chain(requirements, dev_requirements):
        package, range_ = requirement_pair(name, specifiers)
        constraints[package] = constraints[package].intersection(range_) if package in constraints else range_
    return constraints


def resolve(
    root_name: str,
    root_version: str,
    requirements: Iterable[Requirement],
    dev_requirements: Iterable[Requirement] = (),
    provider: Optional[DependencyProvider] = None,
    timeout: Optional[float] = None,
) -> Dict[str, str]:
    """Resolve the transitive closure of a root project's requirements.

    Args:
        root_name: Name of the project being installed.
        root_version: Its version string.
        requirements: (name, specifier text) pairs, e.g. ("chardet", ">=3.0.2,<4").
        dev_requirements: Additional pairs, resolved together with `requirements`.
        provider: Defaults to a PyPIDependencyProvider.
        timeout: Optional resolution budget in seconds.

    Returns:
        Canonical package name -> version string for every selected package,
        the root included. A non-zero epoch is kept (``1!2.0.0``).

    Raises:
        VersionSyntaxError: `root_version` is malformed.
        SpecifierSyntaxError: a requirement is malformed.
        ResolutionFailure: the requirements cannot be satisfied together.
        ResolutionTimeout: `timeout` elapsed.
        ProviderError: the registry could not be queried.
    """
    version = Version.parse(root_version)
    root = canonicalize_name(root_name)
    dependencies = root_dependencies(requirements, dev_requirements)
    if provider is None:
        provider = PyPIDependencyProvider()

    logger.info("Resolving %s %s with %d direct requirements", root, version, len(dependencies))
    resolver = Resolver(RootDependencyProvider(provider, root, version, dependencies), timeout=timeout)
    solution = resolver.solve(root, version)
    return {package: selected.public for package, selected in sorted(solution.items())}
