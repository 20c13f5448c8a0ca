"""Provider decorator that pins the root project."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from versioning.ranges import Range
from versioning.version import Version

from .base import Dependencies, DependencyProvider


class RootDependencyProvider(DependencyProvider):
    """Wraps another provider and answers for the root project itself.

    The root is not published anywhere: its only version is `root_version`
    and its dependencies are the caller's requirements.
    """

    def __init__(self, inner: DependencyProvider, root_name: str, root_version: Version,
                 root_dependencies: Dict[str, Range]):
        self.inner = inner
        self.root_name = root_name
        self.root_version = root_version
        self.root_dependencies = dict(root_dependencies)

    def choose_version(self, candidates: Sequence[Tuple[str, Range]]) -> Tuple[str, Optional[Version]]:
        for package, range_ in candidates:
            if package == self.root_name:
                return package, self.root_version if range_.contains(self.root_version) else None
        others = [(package, range_) for package, range_ in candidates if package != self.root_name]
        return self.inner.choose_version(others)

    def dependencies_of(self, package: str, version: Version) -> Dependencies:
        if package == self.root_name and version == self.root_version:
            return dict(self.root_dependencies)
        return self.inner.dependencies_of(package, version)
