"""SDK version parsing and ordering.

.NET SDK versions have up to four numeric components and an optional
prerelease label, e.g. "8.0.100" or "8.0.100-preview.7.23376.3". They are
not semver (four components, and labels are compared as opaque strings),
so SdkVersion implements its own parsing and ordering. The semver package
is only used to classify an update as major/minor/patch for dependency
metadata in commit messages.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

import semver

PRERELEASE_MARKER = "-"
VERSION_MARKER = "."

# Absent components sort before any present value
UNSET = -1


def _component(value: str) -> int | None:
    """Parse one numeric component, rejecting anything that wouldn't round-trip."""
    if not value or not value.isascii() or not value.isdigit():
        return None
    if len(value) > 1 and value.startswith("0"):
        return None
    return int(value)


@functools.total_ordering
@dataclass(frozen=True)
class SdkVersion:
    """A parsed .NET SDK version.

    Attributes:
        major: Major version (always present for a parsed version).
        minor: Minor version, or UNSET.
        patch: Patch version, or UNSET.
        build: Fourth component, or UNSET.
        prerelease: Everything after the first "-", kept verbatim.
    """

    major: int
    minor: int = UNSET
    patch: int = UNSET
    build: int = UNSET
    prerelease: str = ""

    @classmethod
    def try_parse(cls, value: str | None) -> SdkVersion | None:
        """Parse a version string, returning None if it is not valid.

        Examples:
            "8.0.100" → SdkVersion(8, 0, 100)
            "8.0.100-rc.1.23415.5" → SdkVersion(8, 0, 100, prerelease="rc.1.23415.5")
            "8.0.100.1.2" → None (more than four components)
            "a.1" → None
        """
        if not value:
            return None

        numbers, marker, prerelease = value.partition(PRERELEASE_MARKER)
        if marker and not prerelease:
            return None

        chunks = numbers.split(VERSION_MARKER)
        if len(chunks) > 4:
            return None

        parts: list[int] = []
        for chunk in chunks:
            part = _component(chunk)
            if part is None:
                return None
            parts.append(part)

        while len(parts) < 4:
            parts.append(UNSET)

        return cls(*parts, prerelease=prerelease)

    @classmethod
    def parse(cls, value: str) -> SdkVersion:
        """Parse a version string, raising ValueError if it is not valid."""
        version = cls.try_parse(value)
        if version is None:
            raise ValueError(f"'{value}' is not a valid .NET SDK version.")
        return version

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def compare_to(self, other: SdkVersion) -> int:
        """Return -1, 0 or 1 as this version sorts before, with or after other.

        Numeric components are compared first. A release sorts after any
        prerelease with the same numbers, and two prerelease labels are
        compared ordinally.
        """
        mine = (self.major, self.minor, self.patch, self.build)
        theirs = (other.major, other.minor, other.patch, other.build)
        if mine != theirs:
            return 1 if mine > theirs else -1
        if self.prerelease and other.prerelease:
            if self.prerelease == other.prerelease:
                return 0
            return 1 if self.prerelease > other.prerelease else -1
        if self.prerelease:
            return -1
        return 1 if other.prerelease else 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SdkVersion):
            return NotImplemented
        return self.compare_to(other) < 0

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.patch, self.build]
        version = VERSION_MARKER.join(str(p) for p in parts if p > UNSET)
        return f"{version}{PRERELEASE_MARKER}{self.prerelease}" if self.prerelease else version


def parse_semver(version_str: str) -> semver.Version:
    """Parse the major.minor.patch part of an SDK version as semver.

    Missing components are padded with zeros and anything past the third
    component (including prerelease labels) is ignored:
    - "8" → "8.0.0"
    - "8.0.100-rc.1.23415.5" → "8.0.100"
    """
    numbers = version_str.split(PRERELEASE_MARKER, 1)[0]
    parts = numbers.split(VERSION_MARKER)
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(VERSION_MARKER.join(parts[:3]))


def compare_builds(left: str, right: str) -> int:
    """Compare two daily build versions, returning -1, 0 or 1.

    Prerelease labels are compared identifier by identifier, with numeric
    identifiers compared as numbers, so 8.0.100-rc.1.23415.10 is newer
    than 8.0.100-rc.1.23415.9. Versions that aren't valid semver fall back
    to SdkVersion ordering.
    """
    if semver.Version.is_valid(left) and semver.Version.is_valid(right):
        return semver.Version.parse(left).compare(right)
    return SdkVersion.parse(left).compare_to(SdkVersion.parse(right))


def update_kind(current: str, latest: str) -> str:
    """Classify an SDK update as "major", "minor" or "patch".

    SDK feature bands (8.0.100 → 8.0.200) are patch updates since only the
    major and minor components identify a .NET release.
    """
    old = parse_semver(current)
    new = parse_semver(latest)
    if old.major != new.major:
        return "major"
    if old.minor != new.minor:
        return "minor"
    return "patch"
