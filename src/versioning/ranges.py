"""Version ranges: normalized unions of intervals over Version.

A Range is an immutable, sorted tuple of non-empty, non-overlapping and
non-touching intervals whose finite bounds are always [lower, upper). Every
operation returns a normalized Range, so value equality is set equality.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .version import Version


@dataclass(frozen=True)
class Bound:
    """A finite interval endpoint."""
    version: Version
    inclusive: bool


@dataclass(frozen=True)
class Interval:
    """An interval; None on either side means unbounded."""
    lower: Optional[Bound]
    upper: Optional[Bound]

    def is_empty(self) -> bool:
        lower, upper = self.lower, self.upper
        if upper is None:
            return False
        if lower is None:
            # (-inf, lowest) holds nothing because lowest is the minimum.
            return upper.version == Version.lowest() and not upper.inclusive
        if lower.version < upper.version:
            return False
        return not (lower.version == upper.version and lower.inclusive and upper.inclusive)

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower.version:
                return False
            if version == self.lower.version and not self.lower.inclusive:
                return False
        if self.upper is not None:
            if version > self.upper.version:
                return False
            if version == self.upper.version and not self.upper.inclusive:
                return False
        return True

    def is_point(self) -> bool:
        lower, upper = self.lower, self.upper
        if lower is None or upper is None or not lower.inclusive:
            return False
        if upper.inclusive:
            return lower.version == upper.version
        return upper.version == lower.version.successor()

    def __str__(self) -> str:
        lower, upper = self.lower, self.upper
        if lower is None and upper is None:
            return "*"
        if self.is_point():
            return f"=={lower.version}"
        parts = []
        if lower is not None:
            parts.append(_lower_text(lower))
        if upper is not None:
            parts.append(_upper_text(upper))
        return ", ".join(parts)


def _lower_text(bound: Bound) -> str:
    # [1.0.0dev0 and (1.0.0 are the same bound.
    previous = bound.version.predecessor() if bound.version.dev == 0 else None
    if bound.inclusive and previous is not None:
        return f">{previous}"
    return f"{'>=' if bound.inclusive else '>'}{bound.version}"


def _upper_text(bound: Bound) -> str:
    previous = bound.version.predecessor() if bound.version.dev == 0 else None
    if not bound.inclusive and previous is not None:
        return f"<={previous}"
    return f"{'<=' if bound.inclusive else '<'}{bound.version}"


def _lower_key(bound: Optional[Bound]):
    """Sort key for lower bounds: -inf first; inclusive before exclusive at equal versions."""
    if bound is None:
        return (0, None, 0)
    return (1, bound.version, 0 if bound.inclusive else 1)


def _lower_max(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None:
        return b
    if b is None:
        return a
    if a.version != b.version:
        return a if a.version > b.version else b
    return a if not a.inclusive else b


def _upper_min(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None:
        return b
    if b is None:
        return a
    if a.version != b.version:
        return a if a.version < b.version else b
    return a if not a.inclusive else b


def _upper_max(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None or b is None:
        return None
    if a.version != b.version:
        return a if a.version > b.version else b
    return a if a.inclusive else b


def _upper_before(a: Optional[Bound], b: Optional[Bound]) -> bool:
    """True when upper bound a ends strictly before upper bound b."""
    if a is None:
        return False
    if b is None:
        return True
    if a.version != b.version:
        return a.version < b.version
    return not a.inclusive and b.inclusive


def _joins(earlier: Interval, later: Interval) -> bool:
    """Whether `later` (with lower bound >= earlier's) overlaps or touches `earlier`."""
    if earlier.upper is None or later.lower is None:
        return True
    if later.lower.version < earlier.upper.version:
        return True
    if later.lower.version == earlier.upper.version:
        return earlier.upper.inclusive or later.lower.inclusive
    return False


def _canonical(interval: Interval) -> Interval:
    """Rewrite bounds as [lower, upper).

    Every version has an immediate successor, so an exclusive lower bound
    (v becomes [successor(v) and an inclusive upper bound v] becomes
    successor(v)). Equal sets then have equal intervals.
    """
    lower, upper = interval.lower, interval.upper
    if lower is not None and not lower.inclusive:
        lower = Bound(lower.version.successor(), True)
    if lower is not None and lower.version == Version.lowest():
        lower = None
    if upper is not None and upper.inclusive:
        upper = Bound(upper.version.successor(), False)
    return Interval(lower, upper)


def _make(intervals: Iterable[Interval]) -> "Range":
    """Canonicalize bounds, sort, drop empties and merge touching intervals."""
    cleaned = []
    for interval in intervals:
        interval = _canonical(interval)
        if not interval.is_empty():
            cleaned.append(interval)
    cleaned.sort(key=lambda i: _lower_key(i.lower))

    merged: List[Interval] = []
    for interval in cleaned:
        if merged and _joins(merged[-1], interval):
            last = merged[-1]
            merged[-1] = Interval(last.lower, _upper_max(last.upper, interval.upper))
        else:
            merged.append(interval)
    return Range(tuple(merged))


class Range:
    """An immutable set of versions."""

    __slots__ = ("_intervals",)

    def __init__(self, intervals: Tuple[Interval, ...] = ()):
        # Callers outside this module should use the named constructors,
        # which guarantee normalization.
        self._intervals = tuple(intervals)

    # -- constructors -------------------------------------------------------

    @classmethod
    def none(cls) -> "Range":
        return cls(())

    @classmethod
    def any(cls) -> "Range":
        return cls((Interval(None, None),))

    @classmethod
    def exact(cls, version: Version) -> "Range":
        bound = Bound(version, True)
        return _make([Interval(bound, bound)])

    @classmethod
    def higher_than(cls, version: Version) -> "Range":
        """[version, +inf)"""
        return _make([Interval(Bound(version, True), None)])

    @classmethod
    def strictly_higher_than(cls, version: Version) -> "Range":
        """(version, +inf)"""
        return _make([Interval(Bound(version, False), None)])

    @classmethod
    def strictly_lower_than(cls, version: Version) -> "Range":
        """(-inf, version)"""
        return _make([Interval(None, Bound(version, False))])

    @classmethod
    def lower_than(cls, version: Version) -> "Range":
        """(-inf, version]"""
        return _make([Interval(None, Bound(version, True))])

    @classmethod
    def between(cls, lower: Version, upper: Version) -> "Range":
        """[lower, upper)"""
        return _make([Interval(Bound(lower, True), Bound(upper, False))])

    # -- algebra ------------------------------------------------------------

    @property
    def intervals(self) -> Tuple[Interval, ...]:
        return self._intervals

    def is_empty(self) -> bool:
        return not self._intervals

    def is_any(self) -> bool:
        return self._intervals == (Interval(None, None),)

    def contains(self, version: Version) -> bool:
        return any(interval.contains(version) for interval in self._intervals)

    def __contains__(self, version: Version) -> bool:
        return self.contains(version)

    def union(self, other: "Range") -> "Range":
        return _make(self._intervals + other._intervals)

    def intersection(self, other: "Range") -> "Range":
        result = []
        left, right = self._intervals, other._intervals
        i = j = 0
        while i < len(left) and j < len(right):
            a, b = left[i], right[j]
            candidate = Interval(_lower_max(a.lower, b.lower), _upper_min(a.upper, b.upper))
            if not candidate.is_empty():
                result.append(candidate)
            # Advance whichever interval ends first.
            if _upper_before(a.upper, b.upper):
                i += 1
            else:
                j += 1
        return _make(result)

    def negate(self) -> "Range":
        gaps = []
        previous: Optional[Bound] = None
        started = False
        for interval in self._intervals:
            if interval.lower is not None:
                gap_lower = None if not started else Bound(previous.version, not previous.inclusive)
                gaps.append(Interval(gap_lower, Bound(interval.lower.version, not interval.lower.inclusive)))
            started = True
            previous = interval.upper
            if previous is None:
                return _make(gaps)
        if not started:
            return Range.any()
        gaps.append(Interval(Bound(previous.version, not previous.inclusive), None))
        return _make(gaps)

    def is_subset_of(self, other: "Range") -> bool:
        return self.intersection(other) == self

    def is_disjoint(self, other: "Range") -> bool:
        return self.intersection(other).is_empty()

    def lowest_version(self) -> Version:
        """Infimum of the set, or Version.lowest() when unbounded below or empty."""
        if not self._intervals or self._intervals[0].lower is None:
            return Version.lowest()
        return self._intervals[0].lower.version

    def filter(self, versions: Iterable[Version]) -> List[Version]:
        """Return the given versions that fall inside this range, preserving order."""
        return [v for v in versions if self.contains(v)]

    # -- value semantics ----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return self._intervals == other._intervals

    def __hash__(self) -> int:
        return hash(self._intervals)

    def __str__(self) -> str:
        if not self._intervals:
            return "<empty>"
        return " || ".join(str(interval) for interval in self._intervals)

    def __repr__(self) -> str:
        return f"Range('{self}')"
