"""Tests for the Range algebra."""

import itertools

import pytest

from versioning.ranges import Range
from versioning.specifiers import parse_specifiers
from versioning.version import Version


def v(text):
    return Version.parse(text)


@pytest.fixture
def sample_ranges():
    """A spread of ranges exercising bounded, unbounded, exact and empty shapes."""
    return [
        Range.none(),
        Range.any(),
        Range.exact(v("1.0.0")),
        Range.exact(Version.lowest()),
        Range.higher_than(v("1.0.0")),
        Range.strictly_higher_than(v("2.0.0")),
        Range.strictly_lower_than(v("1.5.0")),
        Range.lower_than(v("1.0.0")),
        Range.between(v("1.0.0"), v("2.0.0")),
        Range.between(v("0.5.0"), v("1.0.0")).union(Range.between(v("3.0.0"), v("4.0.0"))),
        Range.exact(v("1.0.0")).negate(),
    ]


SAMPLE_VERSIONS = ["0.0.0a0", "0.1.0", "0.5.0", "1.0.0a1", "1.0.0", "1.0.0post1", "1.5.0",
                   "2.0.0", "2.0.1", "3.0.0", "3.5.0", "4.0.0", "10.0.0"]


class TestRangeConstructors:
    """Test membership of the named constructors."""

    def test_none_and_any(self):
        assert Range.none().is_empty()
        assert not Range.any().is_empty()
        assert Range.any().is_any()
        assert v("5.0.0") in Range.any()
        assert v("5.0.0") not in Range.none()

    def test_between_is_half_open(self):
        r = Range.between(v("1.0.0"), v("2.0.0"))
        assert v("1.0.0") in r
        assert v("1.9.9") in r
        assert v("2.0.0") not in r
        assert v("0.9.9") not in r

    def test_strict_bounds(self):
        assert v("1.0.0") not in Range.strictly_lower_than(v("1.0.0"))
        assert v("1.0.0") in Range.lower_than(v("1.0.0"))
        assert v("2.0.0") not in Range.strictly_higher_than(v("2.0.0"))
        assert v("2.0.1") in Range.strictly_higher_than(v("2.0.0"))

    def test_inverted_between_is_empty(self):
        assert Range.between(v("2.0.0"), v("1.0.0")).is_empty()
        assert Range.between(v("1.0.0"), v("1.0.0")).is_empty()

    def test_below_lowest_is_empty(self):
        assert Range.strictly_lower_than(Version.lowest()).is_empty()

    def test_str(self):
        assert str(Range.between(v("3.0.2"), v("4.0.0"))) == ">=3.0.2, <4.0.0"
        assert str(Range.exact(v("1.0.0"))) == "==1.0.0"
        assert str(Range.any()) == "*"
        assert str(Range.none()) == "<empty>"
        assert str(Range.exact(v("1.0.0")).negate()) == "<1.0.0 || >1.0.0"


class TestRangeAlgebra:
    """Test set laws of union, intersection and negation."""

    def test_negate_exact(self):
        r = Range.exact(v("1.0.0")).negate()
        assert len(r.intervals) == 2
        assert v("1.0.0") not in r
        assert v("0.9.0") in r and v("1.0.1") in r

    def test_negate_exact_lowest_is_one_interval(self):
        r = Range.exact(Version.lowest()).negate()
        assert len(r.intervals) == 1
        assert Version.lowest() not in r
        assert v("0.0.0") in r

    def test_higher_than_lowest_is_any(self):
        assert Range.higher_than(Version.lowest()) == Range.any()

    def test_touching_intervals_merge(self):
        merged = Range.between(v("1.0.0"), v("2.0.0")).union(Range.between(v("2.0.0"), v("3.0.0")))
        assert merged == Range.between(v("1.0.0"), v("3.0.0"))
        assert len(merged.intervals) == 1

    def test_open_gap_does_not_merge(self):
        r = Range.strictly_lower_than(v("1.0.0")).union(Range.strictly_higher_than(v("1.0.0")))
        assert len(r.intervals) == 2

    def test_double_negation(self, sample_ranges):
        for r in sample_ranges:
            assert r.negate().negate() == r

    def test_complement_laws(self, sample_ranges):
        for r in sample_ranges:
            assert r.union(r.negate()) == Range.any()
            assert r.intersection(r.negate()).is_empty()

    def test_commutative_and_associative(self, sample_ranges):
        for a, b in itertools.product(sample_ranges, repeat=2):
            assert a.union(b) == b.union(a)
            assert a.intersection(b) == b.intersection(a)
        for a, b, c in itertools.islice(itertools.product(sample_ranges, repeat=3), 200):
            assert a.union(b).union(c) == a.union(b.union(c))
            assert a.intersection(b).intersection(c) == a.intersection(b.intersection(c))

    def test_de_morgan(self, sample_ranges):
        for a, b in itertools.product(sample_ranges, repeat=2):
            assert a.union(b).negate() == a.negate().intersection(b.negate())

    def test_membership_agrees_with_set_operations(self, sample_ranges):
        versions = [v(t) for t in SAMPLE_VERSIONS]
        for a, b in itertools.product(sample_ranges, repeat=2):
            for version in versions:
                assert (version in a.intersection(b)) == (version in a and version in b)
                assert (version in a.union(b)) == (version in a or version in b)
                assert (version in a.negate()) == (version not in a)

    def test_subset_and_disjoint(self):
        narrow = Range.between(v("1.2.0"), v("1.3.0"))
        wide = Range.between(v("1.0.0"), v("2.0.0"))
        assert narrow.is_subset_of(wide)
        assert not wide.is_subset_of(narrow)
        assert Range.none().is_subset_of(narrow)
        assert wide.is_disjoint(Range.higher_than(v("2.0.0")))
        assert not wide.is_disjoint(Range.higher_than(v("1.9.0")))


class TestRangeQueries:
    """Test lowest_version and filter."""

    def test_lowest_version(self):
        assert Range.between(v("1.0.0"), v("2.0.0")).lowest_version() == v("1.0.0")
        assert Range.strictly_lower_than(v("2.0.0")).lowest_version() == Version.lowest()
        assert Range.none().lowest_version() == Version.lowest()

    def test_filter_preserves_order(self):
        versions = [v("3.0.0"), v("1.0.0"), v("1.5.0"), v("2.0.0")]
        assert Range.between(v("1.0.0"), v("2.0.0")).filter(versions) == [v("1.0.0"), v("1.5.0")]

    def test_hashable(self):
        assert len({Range.exact(v("1.0")), Range.exact(v("1.0.0"))}) == 1


class TestAdjacentVersions:
    """Bounds at a version and its immediate successor describe the same set."""

    def test_successor(self):
        assert v("1.0.0").successor() == v("1.0.0dev0")
        assert v("1.0.0post1dev3").successor() == v("1.0.0post1dev4")
        assert v("1.0.0dev0").predecessor() == v("1.0.0")
        assert v("1.0.0").predecessor() is None

    def test_open_gap_to_successor_is_empty(self):
        assert parse_specifiers(">1.0.0,<1.0.0dev0").is_empty()
        assert Range.strictly_higher_than(v("1.0.0")).intersection(
            Range.strictly_lower_than(v("1.0.0dev0"))
        ) == Range.none()

    def test_equivalent_bounds_are_equal(self):
        assert Range.strictly_higher_than(v("1.0.0")) == Range.higher_than(v("1.0.0dev0"))
        assert Range.lower_than(v("1.0.0")) == Range.strictly_lower_than(v("1.0.0dev0"))
        assert Range.exact(v("1.0.0")) == Range.between(v("1.0.0"), v("1.0.0dev0"))

    def test_subset_across_equivalent_bounds(self):
        assert Range.strictly_higher_than(v("1.0.0")).is_subset_of(Range.higher_than(v("1.0.0dev0")))
        assert Range.higher_than(v("1.0.0dev0")).is_subset_of(Range.strictly_higher_than(v("1.0.0")))

    def test_bounds_are_canonical(self, sample_ranges):
        for r in sample_ranges:
            for interval in r.intervals:
                assert interval.lower is None or interval.lower.inclusive
                assert interval.upper is None or not interval.upper.inclusive
                assert not interval.is_empty()

    def test_str_keeps_written_form(self):
        assert str(Range.strictly_higher_than(v("1.0.0"))) == ">1.0.0"
        assert str(Range.lower_than(v("2.0.0"))) == "<=2.0.0"
        assert str(parse_specifiers(">=1.0,<=2.0")) == ">=1.0.0, <=2.0.0"
