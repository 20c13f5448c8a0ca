"""PEP 440 style version model with a total ordering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from errors import VersionErrorKind, VersionSyntaxError

# Adapted from the `packaging` project's VERSION_PATTERN. The pre-release
# label is captured loosely so unknown labels can be reported precisely.
VERSION_PATTERN = re.compile(
    r"""
    ^\s*v?
    (?:(?P<epoch>[0-9]+)!)?
    (?P<release>[0-9]+(?:\.[0-9]+)*)
    (?P<pre>
        [-_.]?
        (?P<pre_l>alpha|beta|preview|pre|rc|a|b|c)
        [-_.]?
        (?P<pre_n>[0-9]+)?
    )?
    (?P<post>
        (?:-(?P<post_n1>[0-9]+))
        |
        (?:[-_.]?(?P<post_l>post|rev|r)[-_.]?(?P<post_n2>[0-9]+)?)
    )?
    (?P<dev>[-_.]?(?P<dev_l>dev)[-_.]?(?P<dev_n>[0-9]+)?)?
    (?:\+(?P<local>[a-z0-9]+(?:[-_.][a-z0-9]+)*))?
    \s*$
    """,
    re.VERBOSE | re.IGNORECASE,
)

# Matches a well-formed release followed by an alphabetic tag we do not know,
# e.g. "1.0.0gamma1". Used only to classify the parse error.
_UNKNOWN_TAG_PATTERN = re.compile(r"^\s*v?(?:[0-9]+!)?[0-9]+(?:\.[0-9]+)*[-_.]?(?P<tag>[a-z]+)", re.IGNORECASE)


class PreReleaseKind(Enum):
    """Pre-release phases, in ascending order."""
    ALPHA = "a"
    BETA = "b"
    RELEASE_CANDIDATE = "rc"

    @property
    def rank(self) -> int:
        return _PRE_RANK[self]

    @classmethod
    def from_tag(cls, tag: str, full_version: str = "") -> "PreReleaseKind":
        """Map a pre-release label (a, alpha, b, beta, rc, c, pre, preview) to its kind."""
        kind = _PRE_TAGS.get(tag.lower())
        if kind is None:
            raise VersionSyntaxError(VersionErrorKind.UNKNOWN_PRERELEASE, full_version or tag, tag)
        return kind


_PRE_RANK = {
    PreReleaseKind.ALPHA: 0,
    PreReleaseKind.BETA: 1,
    PreReleaseKind.RELEASE_CANDIDATE: 2,
}

_PRE_TAGS = {
    "a": PreReleaseKind.ALPHA,
    "alpha": PreReleaseKind.ALPHA,
    "b": PreReleaseKind.BETA,
    "beta": PreReleaseKind.BETA,
    "rc": PreReleaseKind.RELEASE_CANDIDATE,
    "c": PreReleaseKind.RELEASE_CANDIDATE,
    "pre": PreReleaseKind.RELEASE_CANDIDATE,
    "preview": PreReleaseKind.RELEASE_CANDIDATE,
}

_KNOWN_TAGS = frozenset(_PRE_TAGS) | {"post", "rev", "r", "dev"}

# A final release ranks above every pre-release of the same release.
_FINAL_RANK = 3


def _parse_int(part: str, full_version: str) -> int:
    try:
        value = int(part)
    except (TypeError, ValueError):
        raise VersionSyntaxError(VersionErrorKind.NON_INTEGER, full_version, part) from None
    if value < 0:
        raise VersionSyntaxError(VersionErrorKind.NON_INTEGER, full_version, part)
    return value


@dataclass(frozen=True, eq=False)
class Version:
    """An immutable version identifier.

    Ordering compares (epoch, release, pre-release, post, dev):

    - release segments compare with trailing zeros ignored, so 1.0 == 1.0.0;
    - a pre-release sorts below its final release (1.0.0a0 < 1.0.0);
    - an absent post or dev marker sorts below a present one, so
      1.0.0 < 1.0.0post0 and 1.0.0 < 1.0.0dev0.

    The local segment is kept for display only and takes no part in ordering,
    equality or hashing.
    """

    release: Tuple[int, ...] = (0, 0, 0)
    epoch: int = 0
    pre: Optional[Tuple[PreReleaseKind, int]] = None
    post: Optional[int] = None
    dev: Optional[int] = None
    local: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        release = tuple(self.release)
        if not release:
            raise VersionSyntaxError(VersionErrorKind.SEGMENT_COUNT, repr(self.release))
        if len(release) < 3:
            release = release + (0,) * (3 - len(release))
        object.__setattr__(self, "release", release)

    # -- construction -------------------------------------------------------

    @classmethod
    def new(cls, major: int, minor: int = 0, patch: int = 0) -> "Version":
        return cls(release=(major, minor, patch))

    @classmethod
    def zero(cls) -> "Version":
        return cls.new(0, 0, 0)

    @classmethod
    def one(cls) -> "Version":
        return cls.new(1, 0, 0)

    @classmethod
    def lowest(cls) -> "Version":
        """The minimum of the ordering: 0.0.0a0."""
        return cls(release=(0, 0, 0), pre=(PreReleaseKind.ALPHA, 0))

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse a version string.

        Raises:
            VersionSyntaxError: with kind SEGMENT_COUNT, NON_INTEGER or
                UNKNOWN_PRERELEASE.
        """
        if not isinstance(text, str) or not text.strip():
            raise VersionSyntaxError(VersionErrorKind.SEGMENT_COUNT, str(text))

        match = VERSION_PATTERN.match(text)
        if match is None:
            cls._raise_for_unmatched(text)

        release = tuple(_parse_int(p, text) for p in match.group("release").split("."))
        epoch = _parse_int(match.group("epoch"), text) if match.group("epoch") else 0

        pre = None
        if match.group("pre_l"):
            kind = PreReleaseKind.from_tag(match.group("pre_l"), text)
            pre = (kind, _parse_int(match.group("pre_n"), text) if match.group("pre_n") else 0)

        post = None
        if match.group("post"):
            post_n = match.group("post_n1") or match.group("post_n2")
            post = _parse_int(post_n, text) if post_n else 0

        dev = None
        if match.group("dev"):
            dev = _parse_int(match.group("dev_n"), text) if match.group("dev_n") else 0

        local = match.group("local").lower() if match.group("local") else None
        return cls(release=release, epoch=epoch, pre=pre, post=post, dev=dev, local=local)

    @staticmethod
    def _raise_for_unmatched(text: str) -> None:
        """Classify a string VERSION_PATTERN rejected and raise accordingly."""
        stripped = text.strip()
        head = stripped.split("+", 1)[0]
        if head[:1] in ("v", "V"):
            head = head[1:]
        head = head.split("!", 1)[-1]
        for segment in head.split("."):
            if segment and not segment[0].isdigit() and segment.lower() not in _KNOWN_TAGS:
                raise VersionSyntaxError(VersionErrorKind.NON_INTEGER, text, segment)

        tag_match = _UNKNOWN_TAG_PATTERN.match(stripped)
        if tag_match and tag_match.group("tag").lower() not in _KNOWN_TAGS:
            raise VersionSyntaxError(VersionErrorKind.UNKNOWN_PRERELEASE, text, tag_match.group("tag"))
        raise VersionSyntaxError(VersionErrorKind.SEGMENT_COUNT, text)

    # -- accessors ----------------------------------------------------------

    @property
    def major(self) -> int:
        return self.release[0]

    @property
    def minor(self) -> int:
        return self.release[1]

    @property
    def patch(self) -> int:
        return self.release[2]

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None or self.dev is not None

    # -- bumps --------------------------------------------------------------

    def bump_major(self) -> "Version":
        return replace(self, release=(self.major + 1,) + self.release[1:])

    def bump_minor(self) -> "Version":
        return replace(self, release=self.release[:1] + (self.minor + 1,) + self.release[2:])

    def bump_patch(self) -> "Version":
        return replace(self, release=self.release[:2] + (self.patch + 1,) + self.release[3:])

    def bump_post(self) -> "Version":
        return replace(self, post=0 if self.post is None else self.post + 1)

    def bump_dev(self) -> "Version":
        return replace(self, dev=0 if self.dev is None else self.dev + 1)

    def pre_release(self, kind: PreReleaseKind) -> "Version":
        return replace(self, pre=(kind, 0))

    def successor(self) -> "Version":
        """The next version in the ordering; nothing sorts strictly between the two.

        An absent dev marker sorts just below dev0, so the successor always
        moves along the dev axis.
        """
        return replace(self, dev=0 if self.dev is None else self.dev + 1, local=None)

    def predecessor(self) -> Optional["Version"]:
        """Inverse of successor(), or None when this is not a dev release."""
        if self.dev is None:
            return None
        return replace(self, dev=None if self.dev == 0 else self.dev - 1, local=None)

    @property
    def public(self) -> str:
        """Display form including a non-zero epoch, suitable for pinning."""
        return f"{self.epoch}!{self}" if self.epoch else str(self)

    def bump(self) -> "Version":
        """Advance the most specific axis that is set: dev, post, pre, then patch."""
        if self.dev is not None:
            return self.bump_dev()
        if self.post is not None:
            return self.bump_post()
        if self.pre is not None:
            kind, counter = self.pre
            return replace(self, pre=(kind, counter + 1))
        return Version(release=self.release[:2] + (self.patch + 1,) + self.release[3:], epoch=self.epoch)

    # -- ordering -----------------------------------------------------------

    def _key(self):
        release = self.release
        while len(release) > 1 and release[-1] == 0:
            release = release[:-1]
        pre_key = (_FINAL_RANK, 0) if self.pre is None else (self.pre[0].rank, self.pre[1])
        post_key = -1 if self.post is None else self.post
        dev_key = -1 if self.dev is None else self.dev
        return (self.epoch, release, pre_key, post_key, dev_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() >= other._key()

    # -- display ------------------------------------------------------------

    def __str__(self) -> str:
        text = ".".join(str(part) for part in self.release)
        if self.pre is not None:
            text += f"{self.pre[0].value}{self.pre[1]}"
        if self.post is not None:
            text += f"post{self.post}"
        if self.dev is not None:
            text += f"dev{self.dev}"
        return text

    def __repr__(self) -> str:
        text = str(self)
        if self.epoch:
            text = f"{self.epoch}!{text}"
        if self.local:
            text = f"{text}+{self.local}"
        return f"Version('{text}')"


def parse_version(text: str) -> Version:
    """Shorthand for Version.parse."""
    return Version.parse(text)
