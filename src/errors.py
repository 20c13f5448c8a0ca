"""Error taxonomy shared by the version model, parsers, providers and solver.

Every error raised on purpose by depsolver derives from DepsolverError so
callers (and the CLI) can dispatch on the concrete class.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from solver.incompatibility import Incompatibility


class DepsolverError(Exception):
    """Base class for all depsolver errors."""


class VersionErrorKind(Enum):
    """Why a version string failed to parse."""
    SEGMENT_COUNT = "segment_count"
    NON_INTEGER = "non_integer"
    UNKNOWN_PRERELEASE = "unknown_prerelease"


class VersionSyntaxError(DepsolverError, ValueError):
    """Raised when a version string does not follow the version grammar."""

    def __init__(self, kind: VersionErrorKind, full_version: str, part: Optional[str] = None):
        self.kind = kind
        self.full_version = full_version
        self.part = part if part is not None else full_version
        if kind == VersionErrorKind.NON_INTEGER:
            message = f"cannot parse '{self.part}' in '{full_version}' as an integer"
        elif kind == VersionErrorKind.UNKNOWN_PRERELEASE:
            message = f"unknown pre-release '{self.part}' in '{full_version}'"
        else:
            message = f"version '{full_version}' must contain dot-separated release numbers"
        super().__init__(message)


class SpecifierSyntaxError(DepsolverError, ValueError):
    """Raised when a requirement or specifier list is malformed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"invalid specifier '{text}': {reason}")


class ResolutionFailure(DepsolverError):
    """The solver proved that no assignment satisfies the root requirements.

    Carries the terminal incompatibility learned during conflict resolution.
    """

    def __init__(self, incompatibility: "Incompatibility"):
        self.incompatibility = incompatibility
        super().__init__(f"no solution: {incompatibility}")


class ResolutionTimeout(DepsolverError):
    """Resolution exceeded the caller-imposed deadline."""

    def __init__(self, timeout: float, decisions: int = 0):
        self.timeout = timeout
        self.decisions = decisions
        super().__init__(f"resolution did not finish within {timeout:g}s ({decisions} decisions made)")


class ProviderError(DepsolverError):
    """Registry or transport failure while fetching versions or dependencies."""

    def __init__(self, package: str, reason: str, version: Optional[str] = None):
        self.package = package
        self.version = version
        self.reason = reason
        target = f"{package} {version}" if version else package
        super().__init__(f"{target}: {reason}")


class PackageNotFound(ProviderError):
    """The registry answered, but does not know the package (or release)."""
