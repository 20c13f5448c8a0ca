"""Tests for the version model: parsing, ordering and bumps."""

import pytest

from errors import VersionErrorKind, VersionSyntaxError
from versioning.version import PreReleaseKind, Version, parse_version


class TestVersionParse:
    """Test Version.parse."""

    @pytest.mark.parametrize("text, expected", [
        ("1.0.0", "1.0.0"),
        ("1.0", "1.0.0"),
        ("2", "2.0.0"),
        ("1.2.3.4", "1.2.3.4"),
        ("v1.2.3", "1.2.3"),
        ("  1.2.3  ", "1.2.3"),
        ("1.0.0a1", "1.0.0a1"),
        ("1.0.0alpha1", "1.0.0a1"),
        ("1.0.0-beta.2", "1.0.0b2"),
        ("1.0.0c1", "1.0.0rc1"),
        ("1.0.0preview", "1.0.0rc0"),
        ("1.0.0.post2", "1.0.0post2"),
        ("1.0.0-3", "1.0.0post3"),
        ("1.0.0rev", "1.0.0post0"),
        ("1.0.0.dev4", "1.0.0dev4"),
        ("1.0.0rc1.post1.dev2", "1.0.0rc1post1dev2"),
    ])
    def test_round_trip_display(self, text, expected):
        """Display is normalized and reparses to an equal version."""
        version = Version.parse(text)
        assert str(version) == expected
        assert Version.parse(str(version)) == version

    def test_epoch_and_local_kept_out_of_display(self):
        """Epoch and local segment are parsed but not rendered by str()."""
        version = Version.parse("2!1.0.0+ubuntu.1")
        assert version.epoch == 2
        assert version.local == "ubuntu.1"
        assert str(version) == "1.0.0"
        assert repr(version) == "Version('2!1.0.0+ubuntu.1')"

    def test_fields(self):
        version = Version.parse("1.2.3rc4")
        assert (version.major, version.minor, version.patch) == (1, 2, 3)
        assert version.pre == (PreReleaseKind.RELEASE_CANDIDATE, 4)
        assert version.is_prerelease

    def test_non_integer_segment(self):
        with pytest.raises(VersionSyntaxError) as exc:
            Version.parse("1.x.0")
        assert exc.value.kind == VersionErrorKind.NON_INTEGER
        assert exc.value.part == "x"
        assert exc.value.full_version == "1.x.0"

    def test_unknown_prerelease(self):
        with pytest.raises(VersionSyntaxError) as exc:
            Version.parse("1.0.0gamma1")
        assert exc.value.kind == VersionErrorKind.UNKNOWN_PRERELEASE
        assert exc.value.part == "gamma"

    @pytest.mark.parametrize("text", ["", "   ", "1..0", "1.0."])
    def test_segment_count(self, text):
        with pytest.raises(VersionSyntaxError) as exc:
            Version.parse(text)
        assert exc.value.kind == VersionErrorKind.SEGMENT_COUNT

    def test_from_tag_rejects_unknown_label(self):
        with pytest.raises(VersionSyntaxError) as exc:
            PreReleaseKind.from_tag("delta", "1.0delta")
        assert exc.value.kind == VersionErrorKind.UNKNOWN_PRERELEASE

    def test_syntax_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_version("not-a-version")


class TestVersionOrdering:
    """Test the total ordering."""

    def test_trailing_zeros_are_equal(self):
        assert Version.parse("1.0") == Version.parse("1.0.0")
        assert Version.parse("1.0.0.0") == Version.parse("1")
        assert hash(Version.parse("1.0")) == hash(Version.parse("1.0.0"))

    def test_local_ignored(self):
        assert Version.parse("1.0.0+abc") == Version.parse("1.0.0")

    def test_prerelease_below_final(self):
        assert Version.parse("1.0.0a0") < Version.parse("1.0.0b0") < Version.parse("1.0.0rc0") < Version.parse("1.0.0")
        assert Version.parse("1.0.0rc9") < Version.parse("1.0.0")

    def test_absent_post_and_dev_sort_first(self):
        assert Version.parse("1.0.0") < Version.parse("1.0.0post0")
        assert Version.parse("1.0.0") < Version.parse("1.0.0dev0")
        assert not Version.parse("1.0.0dev0") < Version.parse("1.0.0")

    def test_epoch_dominates(self):
        assert Version.parse("1!0.1") > Version.parse("99.0")

    def test_sorting(self):
        texts = ["1.10.0", "1.2.0", "1.2.0rc1", "0.9", "1.2.0.post1"]
        ordered = [str(v) for v in sorted(Version.parse(t) for t in texts)]
        assert ordered == ["0.9.0", "1.2.0rc1", "1.2.0", "1.2.0post1", "1.10.0"]

    def test_lowest_is_minimum(self):
        lowest = Version.lowest()
        assert str(lowest) == "0.0.0a0"
        for text in ["0.0.0", "0.0.0a1", "0.0.0.dev0", "0.0.1a0", "1.0.0"]:
            assert lowest < Version.parse(text)
        assert not Version.parse("0.0.0a0") < lowest


class TestVersionBump:
    """Test bump helpers."""

    def test_constructors(self):
        assert str(Version.zero()) == "0.0.0"
        assert str(Version.one()) == "1.0.0"
        assert Version.new(1, 2, 3) == Version.parse("1.2.3")

    def test_bump_precedence(self):
        assert str(Version.parse("1.0.0").bump()) == "1.0.1"
        assert str(Version.parse("1.0.0a1").bump()) == "1.0.0a2"
        assert str(Version.parse("1.0.0post1").bump()) == "1.0.0post2"
        assert str(Version.parse("1.0.0post1.dev3").bump()) == "1.0.0post1dev4"

    def test_bump_is_strictly_greater(self):
        for text in ["1.0.0", "1.0.0a1", "1.0.0post1", "1.0.0dev1"]:
            version = Version.parse(text)
            assert version.bump() > version

    def test_named_bumps(self):
        version = Version.parse("1.2.3")
        assert str(version.bump_major()) == "2.2.3"
        assert str(version.bump_minor()) == "1.3.3"
        assert str(version.bump_patch()) == "1.2.4"
        assert str(version.bump_post()) == "1.2.3post0"
        assert str(version.bump_dev()) == "1.2.3dev0"
        assert str(version.pre_release(PreReleaseKind.BETA)) == "1.2.3b0"
