"""Tests for version parsing and bumping."""

import pytest
from packaging.version import Version

from git_next_tag.version import (
    ZERO_VERSION,
    ChangeType,
    VersionError,
    bump_version,
    parse_version,
)


class TestParseVersion:
    """Tests for parse_version function."""

    def test_valid_version(self):
        """Test parsing a plain semantic version."""
        assert parse_version("1.2.3") == Version("1.2.3")

    def test_zero_components(self):
        """Test that zero components are accepted."""
        assert parse_version("0.0.0") == ZERO_VERSION

    @pytest.mark.parametrize(
        "text", ["1.2", "1.2.3.4", "01.2.3", "1.02.3", "v1.2.3", "1.2.3-rc1", ""]
    )
    def test_invalid_versions(self, text):
        """Test that anything but major.minor.patch is rejected."""
        with pytest.raises(VersionError, match="Invalid version string"):
            parse_version(text)

    def test_ordering_is_numeric(self):
        """Test that versions compare numerically, not lexically."""
        assert parse_version("1.10.0") > parse_version("1.9.9")


class TestBumpVersion:
    """Tests for bump_version function."""

    def test_major_bump(self):
        """Test major bump resets minor and patch."""
        assert bump_version(Version("1.2.3"), ChangeType.MAJOR) == Version("2.0.0")

    def test_minor_bump(self):
        """Test minor bump resets patch."""
        assert bump_version(Version("1.2.3"), ChangeType.MINOR) == Version("1.3.0")

    def test_patch_bump(self):
        """Test patch bump."""
        assert bump_version(Version("1.2.3"), ChangeType.PATCH) == Version("1.2.4")

    def test_no_change(self):
        """Test that no change leaves the version untouched."""
        assert bump_version(Version("1.2.3"), ChangeType.NONE) == Version("1.2.3")

    def test_first_minor_release(self):
        """Test bumping from the default version."""
        assert str(bump_version(ZERO_VERSION, ChangeType.MINOR)) == "0.1.0"


def test_change_type_ordering():
    """Test that change types are ordered by strength."""
    assert ChangeType.NONE < ChangeType.PATCH < ChangeType.MINOR < ChangeType.MAJOR
    assert max(ChangeType.PATCH, ChangeType.MINOR) is ChangeType.MINOR
