"""Semantic version parsing and bumping utilities."""

import re
from enum import IntEnum

from packaging.version import Version

# Strict major.minor.patch, no leading zeros
SEMVER_PATTERN = r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"

# Version used when no matching tag exists
ZERO_VERSION = Version("0.0.0")


class VersionError(Exception):
    """Raised when version operations fail."""

    pass


class ChangeType(IntEnum):
    """Classification of the changes since the last release.

    Members are ordered so that the strongest change compares greatest.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3


def parse_version(version_str: str) -> Version:
    """Parse a semantic version string.

    Args:
        version_str: Version string (e.g., '1.2.3')

    Returns:
        Parsed Version object

    Raises:
        VersionError: If version string is not a plain major.minor.patch version
    """
    if not re.fullmatch(SEMVER_PATTERN, version_str):
        raise VersionError(
            f"Invalid version string '{version_str}': expected major.minor.patch"
        )
    return Version(version_str)


def bump_version(version: Version, change: ChangeType) -> Version:
    """Bump a semantic version by the specified change type.

    Args:
        version: Current version
        change: Change classification of the commits since the current version

    Returns:
        New version, or the same version when change is ChangeType.NONE
    """
    major, minor, patch = version.major, version.minor, version.micro

    if change is ChangeType.MAJOR:
        return Version(f"{major + 1}.0.0")
    elif change is ChangeType.MINOR:
        return Version(f"{major}.{minor + 1}.0")
    elif change is ChangeType.PATCH:
        return Version(f"{major}.{minor}.{patch + 1}")
    return version
