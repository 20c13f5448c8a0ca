"""Tests for requirement and specifier parsing."""

import pytest

from errors import SpecifierSyntaxError
from versioning.ranges import Range
from versioning.specifiers import (
    parse_dependency,
    parse_requirements,
    parse_specifier,
    parse_specifiers,
    requirement_pair,
    split_requirement,
)
from versioning.version import Version


def v(text):
    return Version.parse(text)


class TestParseDependency:
    """Test parse_dependency on registry metadata lines."""

    def test_parenthesised_form(self):
        assert parse_dependency("chardet (<4.0.0,>=3.0.2)") == (
            "chardet", Range.between(v("3.0.2"), v("4.0.0"))
        )
        assert parse_dependency("idna (<3.0.0,>=2.5.0)") == (
            "idna", Range.between(v("2.5.0"), v("3.0.0"))
        )

    def test_bare_form(self):
        assert parse_dependency("chardet<4,>=3.0.2") == (
            "chardet", Range.between(v("3.0.2"), v("4.0.0"))
        )

    def test_no_specifiers_means_any(self):
        assert parse_dependency("pytz") == ("pytz", Range.any())

    def test_extra_marker_is_dropped(self):
        assert parse_dependency("pyOpenSSL (>=0.14.0) ; extra == 'security'") is None
        assert parse_dependency('PySocks!=1.5.7,>=1.5.6; extra == "socks"') is None

    def test_environment_markers_are_evaluated(self):
        assert parse_dependency('six (>=1.0); python_version >= "3"') == ("six", Range.higher_than(v("1.0")))
        assert parse_dependency('enum34; python_version < "3"') is None

    def test_direct_reference_constrains_name_only(self):
        assert parse_dependency("foo @ https://example.com/foo-1.0.tar.gz") == ("foo", Range.any())
        assert split_requirement("Foo @ https://example.com/foo-1.0.tar.gz") == ("foo", "")

    def test_marker_value_named_extra_is_not_an_extra_marker(self):
        assert parse_dependency('six (>=1.0); platform_release != "extra"') == ("six", Range.higher_than(v("1.0")))
        assert parse_dependency('six; python_version >= "3" and extra == "test"') is None

    def test_invalid_marker(self):
        with pytest.raises(SpecifierSyntaxError):
            parse_dependency("six; python_version >>> '3'")

    def test_extras_bracket_ignored(self):
        name, range_ = parse_dependency("requests[security,socks] (>=2.0)")
        assert name == "requests"
        assert range_ == Range.higher_than(v("2.0"))

    def test_name_is_canonicalized(self):
        assert parse_dependency("Zope.Interface>=5")[0] == "zope-interface"

    @pytest.mark.parametrize("text", [
        "",
        "chardet (<<4.0.0)",
        "chardet (>=four)",
        "-foo",
    ])
    def test_malformed(self, text):
        with pytest.raises(SpecifierSyntaxError):
            parse_dependency(text)

    def test_split_requirement_returns_specifier_text(self):
        assert split_requirement("Requests (>=2.0, <3)") == ("requests", "<3,>=2.0")


class TestComparators:
    """Test the comparator table."""

    def test_table(self):
        assert parse_specifier(">=1.0") == Range.higher_than(v("1.0"))
        assert parse_specifier("<1.0") == Range.strictly_lower_than(v("1.0"))
        assert parse_specifier("<=1.0") == Range.lower_than(v("1.0"))
        assert parse_specifier(">1.0") == Range.strictly_higher_than(v("1.0"))
        assert parse_specifier("==1.0") == Range.exact(v("1.0"))
        assert parse_specifier("===1.0") == Range.exact(v("1.0"))
        assert parse_specifier("!=1.0") == Range.exact(v("1.0")).negate()

    def test_compatible_release_two_segments(self):
        r = parse_specifier("~=2.2")
        assert v("2.2.0") in r
        assert v("2.9.9") in r
        assert v("3.0.0") not in r
        assert v("3.0.0a1") not in r
        assert v("2.1.0") not in r

    def test_compatible_release_three_segments(self):
        r = parse_specifier("~=1.4.5")
        assert v("1.4.5") in r
        assert v("1.4.99") in r
        assert v("1.5.0") not in r

    def test_compatible_release_needs_two_segments(self):
        with pytest.raises(SpecifierSyntaxError):
            parse_specifier("~=1")

    def test_wildcards(self):
        r = parse_specifier("==1.2.*")
        assert v("1.2.0") in r
        assert v("1.2.9post1") in r
        assert v("1.3.0") not in r
        assert v("1.1.9") not in r
        excluded = parse_specifier("!=1.2.*")
        assert excluded == r.negate()

    def test_wildcard_only_with_equality(self):
        with pytest.raises(SpecifierSyntaxError):
            parse_specifier(">=1.2.*")

    def test_specifier_list_is_intersection(self):
        assert parse_specifiers(">=1.0, <2.0, !=1.5") == (
            Range.between(v("1.0"), v("2.0")).intersection(Range.exact(v("1.5")).negate())
        )

    def test_empty_list_is_any(self):
        assert parse_specifiers("") == Range.any()
        assert parse_specifiers(None) == Range.any()

    def test_unsatisfiable_list_is_empty(self):
        assert parse_specifiers(">=2.0,<1.0").is_empty()


class TestParseRequirements:
    """Test building constraint sets."""

    def test_duplicates_intersect(self):
        constraints = parse_requirements(["urllib3>=1.21.1", "urllib3 (<1.27)", "certifi"])
        assert constraints == {
            "urllib3": Range.between(v("1.21.1"), v("1.27")),
            "certifi": Range.any(),
        }

    def test_dropped_requirements_are_skipped(self):
        assert parse_requirements(["pytest; extra == 'test'"]) == {}

    def test_requirement_pair(self):
        assert requirement_pair("Django", ">=3.2,<4") == ("django", Range.between(v("3.2"), v("4")))
        with pytest.raises(SpecifierSyntaxError):
            requirement_pair("not a name", ">=1")
