"""Requirement / specifier parsing into (package, Range) constraints.

Requirement lines are parsed with ``packaging.requirements.Requirement``,
which accepts both the parenthesised metadata form used by older releases on
PyPI, e.g. ``chardet (<4.0.0,>=3.0.2)``, and the bare PEP 508 form, e.g.
``chardet<4,>=3.0.2; python_version >= "3"``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from packaging.markers import InvalidMarker, Marker, Variable
from packaging.requirements import InvalidRequirement, Requirement
from packaging.specifiers import InvalidSpecifier, Specifier, SpecifierSet
from packaging.utils import canonicalize_name

from errors import SpecifierSyntaxError, VersionSyntaxError
from .ranges import Range
from .version import PreReleaseKind, Version

logger = logging.getLogger(__name__)


def _release_floor(release: Tuple[int, ...], epoch: int) -> Version:
    """Smallest version whose release starts with `release` (its first alpha)."""
    return Version(release=release, epoch=epoch, pre=(PreReleaseKind.ALPHA, 0))


def _release_segments(text: str) -> Tuple[int, ...]:
    release_text = text.strip().lstrip("vV").split("!")[-1]
    digits = []
    for part in release_text.split("."):
        if not part.isdigit():
            break
        digits.append(int(part))
    return tuple(digits)


def _prefix_range(spec: str, prefix: str) -> Range:
    """Range for ``==X.Y.*``: every version whose release starts with X.Y."""
    try:
        base = Version.parse(prefix)
    except VersionSyntaxError as exc:
        raise SpecifierSyntaxError(spec, str(exc)) from exc
    if base.pre is not None or base.post is not None or base.dev is not None:
        raise SpecifierSyntaxError(spec, "wildcard is only allowed after a release")
    segments = _release_segments(prefix)
    upper = segments[:-1] + (segments[-1] + 1,)
    return Range.between(_release_floor(segments, base.epoch), _release_floor(upper, base.epoch))


def _compatible_range(spec: str, text: str, version: Version) -> Range:
    """Range for ``~=V``: ``>=V`` and below the next incompatible release."""
    segments = _release_segments(text)
    if len(segments) < 2:
        raise SpecifierSyntaxError(spec, "'~=' needs at least two release segments")
    prefix = segments[:-1]
    upper = prefix[:-1] + (prefix[-1] + 1,)
    return Range.higher_than(version).intersection(
        Range.strictly_lower_than(_release_floor(upper, version.epoch))
    )


def compare_to_range(compare: str, version: Version, spec: str = "", version_text: str = "") -> Range:
    """Translate one comparator and version into a Range."""
    if compare == ">=":
        return Range.higher_than(version)
    if compare == "<=":
        return Range.lower_than(version)
    if compare == "<":
        return Range.strictly_lower_than(version)
    if compare == ">":
        return Range.strictly_higher_than(version)
    if compare in ("==", "==="):
        return Range.exact(version)
    if compare == "!=":
        return Range.exact(version).negate()
    if compare == "~=":
        return _compatible_range(spec, version_text or str(version), version)
    raise SpecifierSyntaxError(spec or compare, f"unknown comparator '{compare}'")


def specifier_range(specifier: Specifier) -> Range:
    """Range of a single parsed ``packaging`` Specifier, wildcards included."""
    spec = str(specifier)
    compare, version_text = specifier.operator, specifier.version
    if version_text.endswith(".*"):
        prefix = _prefix_range(spec, version_text[:-2])
        return prefix if compare == "==" else prefix.negate()
    try:
        version = Version.parse(version_text)
    except VersionSyntaxError as exc:
        raise SpecifierSyntaxError(spec, str(exc)) from exc
    return compare_to_range(compare, version, spec, version_text)


def specifier_set_range(specifiers: SpecifierSet) -> Range:
    """Intersection of every specifier in the set; an empty set means any version."""
    result = Range.any()
    for specifier in specifiers:
        result = result.intersection(specifier_range(specifier))
    return result


def parse_specifier(spec: str) -> Range:
    """Parse a single ``<comparator><version>`` pair.

    Raises:
        SpecifierSyntaxError: on an unknown comparator or malformed version.
    """
    try:
        specifier = Specifier(spec.strip())
    except InvalidSpecifier as exc:
        raise SpecifierSyntaxError(spec, str(exc)) from exc
    return specifier_range(specifier)


def parse_specifiers(text: Optional[str]) -> Range:
    """Parse a comma-separated specifier list; the pieces are ANDed.

    An empty or missing list means any version.
    """
    if not text or not text.strip():
        return Range.any()
    try:
        specifiers = SpecifierSet(text)
    except InvalidSpecifier as exc:
        raise SpecifierSyntaxError(text, str(exc)) from exc
    return specifier_set_range(specifiers)


def _mentions_extra(markers) -> bool:
    """Whether a parsed marker tree compares the ``extra`` variable anywhere."""
    for item in markers:
        if isinstance(item, list):
            if _mentions_extra(item):
                return True
        elif isinstance(item, tuple):
            if any(isinstance(node, Variable) and node.value == "extra" for node in item):
                return True
    return False


def _marker_applies(marker: Optional[Marker], text: str) -> bool:
    if marker is None:
        return True
    if _mentions_extra(marker._markers):
        logger.debug("Skipping optional requirement '%s'", text)
        return False
    if not marker.evaluate():
        logger.debug("Skipping requirement '%s': marker does not match this environment", text)
        return False
    return True


def marker_applies(marker_text: Optional[str], text: str = "") -> bool:
    """Whether a requirement guarded by `marker_text` applies here.

    Requirements conditional on an optional feature (``extra == ...``) never
    apply; other markers are evaluated for the running interpreter.

    Raises:
        SpecifierSyntaxError: the marker is malformed.
    """
    if not marker_text or not marker_text.strip():
        return True
    try:
        marker = Marker(marker_text)
    except InvalidMarker as exc:
        raise SpecifierSyntaxError(text or marker_text, f"invalid marker: {exc}") from exc
    return _marker_applies(marker, text or marker_text)


def _parse_requirement(text: str) -> Requirement:
    try:
        return Requirement(text or "")
    except InvalidRequirement as exc:
        raise SpecifierSyntaxError(text, str(exc)) from exc


def split_requirement(text: str) -> Optional[Tuple[str, str]]:
    """Split a requirement line into (canonical name, specifier list text).

    Returns None when the requirement does not apply: it is conditional on an
    optional feature (``extra == ...``) or its environment marker is false for
    the running interpreter. A direct reference (``name @ url``) constrains
    the name only, so its specifier list is empty.

    Raises:
        SpecifierSyntaxError: when the line is malformed.
    """
    req = _parse_requirement(text)
    if not _marker_applies(req.marker, text):
        return None
    return canonicalize_name(req.name), str(req.specifier)


def parse_dependency(text: str) -> Optional[Tuple[str, Range]]:
    """Parse a requirement line into (canonical name, Range).

    Returns None for requirements that do not apply (see split_requirement).

    Raises:
        SpecifierSyntaxError: when the line is malformed.
    """
    req = _parse_requirement(text)
    if not _marker_applies(req.marker, text):
        return None
    return canonicalize_name(req.name), specifier_set_range(req.specifier)


def parse_requirements(lines: Iterable[str]) -> Dict[str, Range]:
    """Build a dependency constraint set from requirement lines.

    Requirements naming the same package are intersected.
    """
    constraints: Dict[str, Range] = {}
    for line in lines:
        parsed = parse_dependency(line)
        if parsed is None:
            continue
        name, range_ = parsed
        constraints[name] = constraints[name].intersection(range_) if name in constraints else range_
    return constraints


def requirement_pair(name: str, specifiers: Optional[str]) -> Tuple[str, Range]:
    """Validate a (name, specifier text) pair as given by callers of resolve()."""
    if not isinstance(name, str):
        raise SpecifierSyntaxError(str(name), "invalid package name")
    try:
        parsed = Requirement(name.strip())
    except InvalidRequirement as exc:
        raise SpecifierSyntaxError(name, "invalid package name") from exc
    if parsed.name != name.strip():
        raise SpecifierSyntaxError(name, "invalid package name")
    return canonicalize_name(parsed.name), parse_specifiers(specifiers)
