"""Semantic version parsing and tag arithmetic.

Versions are ``MAJOR.MINOR.PATCH`` with an optional leading ``v``; tags
always carry the ``v`` prefix. A tag counts as a semver tag exactly when
``parse_version`` accepts it.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

from paks.errors import VersionParseError

_COMPONENTS = ("major", "minor", "patch")


class BumpLevel(str, Enum):
    """Which version component to increment."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"


class Version(NamedTuple):
    """A parsed ``MAJOR.MINOR.PATCH`` version."""

    major: int
    minor: int
    patch: int

    def bump(self, level: BumpLevel) -> Version:
        """Return the next version at ``level``; lower components reset to 0."""
        if level is BumpLevel.MAJOR:
            return Version(self.major + 1, 0, 0)
        if level is BumpLevel.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def to_tag(self) -> str:
        return f"v{self}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: str) -> Version:
    """Parse ``[v]MAJOR.MINOR.PATCH``.

    Each component must consist of ASCII digits only.

    Raises:
        VersionParseError: Naming the component that failed, or the overall
            format when the part count is wrong.
    """
    stripped = text[1:] if text.startswith("v") else text
    parts = stripped.split(".")

    if len(parts) != 3:
        raise VersionParseError(
            f"Invalid version format: {text}. Expected MAJOR.MINOR.PATCH",
            version=text,
            component=None,
        )

    numbers: list[int] = []
    for component, part in zip(_COMPONENTS, parts):
        if not part or not part.isascii() or not part.isdigit():
            raise VersionParseError(
                f"Invalid {component} version in '{text}': {part!r} is not a non-negative integer",
                version=text,
                component=component,
            )
        numbers.append(int(part))

    return Version(*numbers)


def is_semver_tag(tag: str) -> bool:
    try:
        parse_version(tag)
    except VersionParseError:
        return False
    return True


def filter_semver_tags(tags: Iterable[str]) -> list[str]:
    """Keep only tags that parse as versions, preserving order."""
    return [tag for tag in tags if is_semver_tag(tag)]


def normalize_tag(text: str) -> str:
    """Add the ``v`` prefix if missing and check the result parses.

    Raises:
        VersionParseError: If the text is not a version.
    """
    tag = text.strip()
    if not tag.startswith("v"):
        tag = f"v{tag}"
    parse_version(tag)
    return tag


def bump_tag(current: str, level: BumpLevel = BumpLevel.PATCH) -> str:
    """Tag for the version after ``current`` at ``level``.

    Raises:
        VersionParseError: If ``current`` is not a version.
    """
    return parse_version(current).bump(level).to_tag()


def next_patch_tag(current: str) -> str:
    """Tag used by non-interactive publishing: the next patch release."""
    return bump_tag(current, BumpLevel.PATCH)
