"""Tolerant semantic version parsing for the expected server version."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

# MAJOR[.MINOR[.PATCH]][-prerelease][+build], optionally prefixed with "v".
_TOLERANT_PATTERN = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, slots=True)
class ServerVersion:
    """Comparable semantic version; build metadata does not affect ordering."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ServerVersion):
            return NotImplemented
        if self.release != other.release:
            return self.release < other.release
        # A release outranks any of its prereleases.
        if not self.prerelease or not other.prerelease:
            return bool(self.prerelease) and not other.prerelease
        return _compare_prerelease(self.prerelease, other.prerelease) < 0

    @property
    def release(self) -> tuple[int, int, int]:
        return self.major, self.minor, self.patch

    def _precedence_key(self) -> tuple[tuple[int, int, int], tuple[str, ...]]:
        return self.release, self.prerelease


def parse_version(value: str) -> ServerVersion:
    """Parse a version string, accepting missing minor/patch numbers.

    Surrounding whitespace and a leading ``v`` are ignored and leading zeros
    in numeric parts are accepted. Raises ``ValueError`` naming the input when
    the string is not a version.
    """

    if not isinstance(value, str):
        raise ValueError(f"invalid version ({value!r}): expected a string")
    match = _TOLERANT_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"invalid version ({value!r})")
    prerelease = match.group("prerelease")
    build = match.group("build")
    return ServerVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )


def _compare_prerelease(left: tuple[str, ...], right: tuple[str, ...]) -> int:
    for ours, theirs in zip(left, right):
        if ours == theirs:
            continue
        ours_numeric, theirs_numeric = ours.isdigit(), theirs.isdigit()
        if ours_numeric and theirs_numeric:
            return -1 if int(ours) < int(theirs) else 1
        if ours_numeric != theirs_numeric:
            # Numeric identifiers sort before alphanumeric ones.
            return -1 if ours_numeric else 1
        return -1 if ours < theirs else 1
    return (len(left) > len(right)) - (len(left) < len(right))


__all__ = ["ServerVersion", "parse_version"]
