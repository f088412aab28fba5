"""Tests for load-time settings read from the environment."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from ocp_bridge.config import (
    DEFAULT_NATIVE_LIBRARY,
    LOG_LEVEL_ENV,
    NATIVE_LIBRARY_ENV,
    STRICT_DTYPE_ENV,
    BridgeSettings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)
    for name in (NATIVE_LIBRARY_ENV, STRICT_DTYPE_ENV, LOG_LEVEL_ENV):
        monkeypatch.delenv(name, raising=False)


class TestBridgeSettings:
    def test_defaults(self) -> None:
        settings = BridgeSettings.from_env()
        assert settings.native_library == DEFAULT_NATIVE_LIBRARY
        assert settings.strict_dtype is False
        assert settings.log_level is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("1", True), ("true", True), ("YES", True), (" on ", True), ("0", False), ("no", False)],
    )
    def test_strict_dtype(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
    ) -> None:
        monkeypatch.setenv(STRICT_DTYPE_ENV, raw)
        assert BridgeSettings.from_env().strict_dtype is expected

    def test_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        assert BridgeSettings.from_env().log_level == "DEBUG"

    def test_unknown_log_level_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
        assert BridgeSettings.from_env().log_level is None

    def test_native_library(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(NATIVE_LIBRARY_ENV, "vendor.ocp_native")
        assert BridgeSettings.from_env().native_library == "vendor.ocp_native"

    @pytest.mark.parametrize("path", ["", "vendor..native", "vendor/native", "1native"])
    def test_invalid_native_library(self, path: str) -> None:
        with pytest.raises(PydanticValidationError):
            BridgeSettings(native_library=path)

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text(f"{STRICT_DTYPE_ENV}=true\n")
        try:
            assert BridgeSettings.from_env().strict_dtype is True
        finally:
            os.environ.pop(STRICT_DTYPE_ENV, None)

    def test_frozen(self) -> None:
        settings = BridgeSettings()
        with pytest.raises(PydanticValidationError):
            settings.strict_dtype = True
