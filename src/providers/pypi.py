"""Provider backed by the PyPI JSON API."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from packaging.utils import canonicalize_name

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from errors import PackageNotFound, SpecifierSyntaxError, VersionSyntaxError
from registry.pypi.client import fetch_release_versions, fetch_requires_dist
from versioning.cache import TTLCache
from versioning.ranges import Range
from versioning.specifiers import parse_dependency
from versioning.version import Version

from .base import UNKNOWN, Dependencies, DependencyProvider, choose_package_with_fewest_versions

logger = logging.getLogger(__name__)


class PyPIDependencyProvider(DependencyProvider):
    """Fetches releases and requirements from a PyPI-compatible registry.

    Responses are memoized in a TTLCache owned by this instance, so two
    providers never share state.
    """

    def __init__(self, url: Optional[str] = None, cache: Optional[TTLCache] = None, include_yanked: bool = False):
        self.url = url or Constants.REGISTRY_URL_PYPI
        self.cache = cache if cache is not None else TTLCache(default_ttl=Constants.CACHE_TTL_SEC)
        self.include_yanked = include_yanked
        # Parsed version -> registry spelling, needed to build release URLs.
        self._raw_versions: Dict[Tuple[str, Version], str] = {}

    def versions(self, package: str) -> List[Version]:
        """Parsable versions of a package, ascending; [] when the registry does not know it."""
        name = canonicalize_name(package)
        return self.cache.get_or_set(("versions", name), lambda: self._fetch_versions(name))

    def _fetch_versions(self, name: str) -> List[Version]:
        try:
            raw_versions = fetch_release_versions(name, self.url, include_yanked=self.include_yanked)
        except PackageNotFound:
            logger.info("Package %s not found on registry", name)
            return []

        parsed = []
        for raw in raw_versions:
            try:
                version = Version.parse(raw)
            except VersionSyntaxError:
                logger.debug("Skipping unparsable version %s of %s", raw, name)
                continue
            self._raw_versions.setdefault((name, version), raw)
            parsed.append(version)
        parsed.sort()

        if is_debug_enabled(logger):
            logger.debug(
                "Fetched versions",
                extra=extra_context(
                    event="versions",
                    component="pypi_provider",
                    package=name,
                    count=len(parsed),
                    skipped=len(raw_versions) - len(parsed)
                )
            )
        return parsed

    def choose_version(self, candidates: Sequence[Tuple[str, Range]]) -> Tuple[str, Optional[Version]]:
        return choose_package_with_fewest_versions(self.versions, candidates)

    def dependencies_of(self, package: str, version: Version) -> Dependencies:
        name = canonicalize_name(package)
        raw = self._raw_versions.get((name, version), str(version))
        return self.cache.get_or_set(("requires", name, raw), lambda: self._fetch_dependencies(name, raw))

    def _fetch_dependencies(self, name: str, raw_version: str) -> Dependencies:
        try:
            requires = fetch_requires_dist(name, raw_version, self.url)
        except PackageNotFound:
            logger.info("Release %s %s not found on registry; dependencies unknown", name, raw_version)
            return UNKNOWN

        constraints: Dict[str, Range] = {}
        for line in requires:
            try:
                parsed = parse_dependency(line)
            except SpecifierSyntaxError as exc:
                logger.warning("Ignoring requirement of %s %s: %s", name, raw_version, exc)
                continue
            if parsed is None:
                continue
            dep, range_ = parsed
            constraints[dep] = constraints[dep].intersection(range_) if dep in constraints else range_
        return constraints
