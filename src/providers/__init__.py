"""Dependency providers consulted by the resolver."""

from .base import UNKNOWN, DependencyProvider, Unknown, choose_package_with_fewest_versions
from .offline import OfflineDependencyProvider
from .pypi import PyPIDependencyProvider
from .root import RootDependencyProvider

__all__ = [
    "UNKNOWN",
    "Unknown",
    "DependencyProvider",
    "choose_package_with_fewest_versions",
    "OfflineDependencyProvider",
    "PyPIDependencyProvider",
    "RootDependencyProvider",
]
