"""Tests for version stamping and the compatibility helper."""

from __future__ import annotations

from typing import Any

import pytest

from ocp_bridge.shared.error_codes import ErrorCode
from ocp_bridge.shared.exceptions import InitializationError
from ocp_bridge.version import VersionInfo, compute_version_string, is_compatible


class TestComputeVersionString:
    @pytest.mark.parametrize(
        "version",
        ["0.0.1", "1.0.0", "3.2.1", "1.0.0-rc.1", "2.4.0+git.abc123", "1.2.3-beta+exp.sha.5114f85"],
    )
    def test_returned_unchanged(self, fake_library_cls: Any, version: str) -> None:
        assert compute_version_string(fake_library_cls(version=version)) == version

    @pytest.mark.parametrize(
        "version",
        ["", "1.0", "v1.0.0", "01.0.0", "1.0.0-", " 1.0.0", "1.0.0\n", None, 100],
    )
    def test_invalid_versions_rejected(self, fake_library_cls: Any, version: Any) -> None:
        with pytest.raises(InitializationError) as exc_info:
            compute_version_string(fake_library_cls(version=version))
        assert exc_info.value.error_code == ErrorCode.FFI_BRIDGE_INIT_FAILED
        assert exc_info.value.context["reason"] == "INVALID_FORMAT"

    def test_failing_accessor(self) -> None:
        class Failing:
            def print_version(self) -> str:
                raise OSError("symbol not found")

        with pytest.raises(InitializationError) as exc_info:
            compute_version_string(Failing())
        assert "symbol not found" in exc_info.value.native_error


class TestVersionInfo:
    def test_parse(self) -> None:
        info = VersionInfo.parse("1.2.3-alpha.1+build.7")
        assert info.release == (1, 2, 3)
        assert info.prerelease == "alpha.1"
        assert info.build == "build.7"
        assert str(info) == "1.2.3-alpha.1+build.7"

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            VersionInfo.parse("latest")

    @pytest.mark.parametrize(
        "version,required,expected",
        [
            ("1.4.2", "1.3.0", True),
            ("1.3.0", "1.3.0", True),
            ("1.3.0+abc", "1.3.0", True),
            ("1.2.9", "1.3.0", False),
            ("2.0.0", "1.3.0", False),
            ("0.9.0", "1.0.0", False),
        ],
    )
    def test_is_compatible(self, version: str, required: str, expected: bool) -> None:
        assert is_compatible(version, required) is expected
