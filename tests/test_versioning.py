"""Tests for version requirement matching."""

from __future__ import annotations

import pytest

from stamper.errors import ConfigurationError, TemplateVersionMismatch
from stamper.versioning import Version, check_version, parse_requirement, version_matches


class TestVersion:
    """Tests for Version parsing and ordering."""

    def test_parse_and_str(self) -> None:
        """Versions round-trip through str()."""
        assert str(Version.parse("1.2.3")) == "1.2.3"
        assert str(Version.parse("1.2.3-rc.1")) == "1.2.3-rc.1"

    def test_build_metadata_ignored(self) -> None:
        """Build metadata does not affect the parsed version."""
        assert Version.parse("1.2.3+build.5") == Version.parse("1.2.3")

    def test_pre_release_sorts_before_release(self) -> None:
        """1.0.0-alpha < 1.0.0 < 1.0.1."""
        assert Version.parse("1.0.0-alpha") < Version.parse("1.0.0") < Version.parse("1.0.1")

    @pytest.mark.parametrize("text", ["1.2", "v1.2.3", "1.2.3.4", ""])
    def test_invalid_versions(self, text) -> None:
        """Only full major.minor.patch versions parse."""
        with pytest.raises(ValueError):
            Version.parse(text)


class TestVersionMatches:
    """Tests for version_matches()."""

    @pytest.mark.parametrize(
        ("requirement", "version", "expected"),
        [
            ("0.15", "0.15.2", True),
            ("0.15", "0.16.0", False),
            ("^1.2.3", "1.9.0", True),
            ("^1.2.3", "2.0.0", False),
            ("^1.2.3", "1.2.2", False),
            ("^0.0.3", "0.0.4", False),
            ("~1.2", "1.2.9", True),
            ("~1.2", "1.3.0", False),
            ("=1.2.3", "1.2.3", True),
            ("=1.2.3", "1.2.4", False),
            ("=1.2", "1.2.7", True),
            (">1", "1.9.0", False),
            (">1", "2.0.0", True),
            (">1.2.3", "1.2.3", False),
            (">=0.9, <1", "0.15.2", True),
            ("<2", "1.99.0", True),
            ("<2", "2.0.0", False),
            ("<=1.4", "1.4.9", True),
            ("<=1.4", "1.5.0", False),
            ("1.*", "1.7.0", True),
            ("1.*", "2.0.0", False),
            ("*", "0.0.1", True),
        ],
    )
    def test_requirements(self, requirement, version, expected) -> None:
        """Comparators follow Cargo's semantics."""
        assert version_matches(requirement, version) is expected

    def test_pre_release_outside_caret_range(self) -> None:
        """A pre-release of the next minor does not satisfy a caret range."""
        assert version_matches("^0.15", "0.16.0-rc.1") is False

    @pytest.mark.parametrize("requirement", ["abc", ">=", "1.2,", "~>1.2"])
    def test_malformed_requirements(self, requirement) -> None:
        """Malformed requirements raise ValueError."""
        with pytest.raises(ValueError):
            parse_requirement(requirement)


class TestCheckVersion:
    """Tests for check_version()."""

    def test_no_requirement(self) -> None:
        """A missing requirement always passes."""
        check_version(None, "0.15.2")
        check_version("", "0.15.2")

    def test_satisfied(self) -> None:
        """A satisfied requirement passes silently."""
        check_version(">=0.10", "0.15.2")

    def test_mismatch_message(self) -> None:
        """An unsatisfied requirement names both versions."""
        with pytest.raises(TemplateVersionMismatch) as exc_info:
            check_version(">=1.0", "0.15.2")
        assert exc_info.value.message == (
            "Required stamper version not met. Required: >=1.0 was: 0.15.2"
        )

    def test_invalid_requirement(self) -> None:
        """A malformed requirement is a configuration error."""
        with pytest.raises(ConfigurationError, match="Invalid stamper_version"):
            check_version("not-a-version", "0.15.2")
