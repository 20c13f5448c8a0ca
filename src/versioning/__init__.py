"""Version model, version ranges and requirement parsing."""

from .version import PreReleaseKind, Version, parse_version
from .ranges import Range
from .specifiers import parse_dependency, parse_requirements, parse_specifier, parse_specifiers

__all__ = [
    "PreReleaseKind",
    "Version",
    "parse_version",
    "Range",
    "parse_dependency",
    "parse_requirements",
    "parse_specifier",
    "parse_specifiers",
]
