from __future__ import annotations

import sys
import types
from pathlib import Path
from typing import Any, Callable

import pytest

# Ensure src/ is on sys.path so `import ocp_bridge` works without an install
# across different pytest/runner configurations.
_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

from ocp_bridge.config import BridgeSettings
from ocp_bridge.exposure import ExposureRegistry
from ocp_bridge.numeric_bridge import DECLARED_DESCRIPTORS, NumericBridge
from ocp_bridge.shared.ffi_wrapper import FfiResultBuilder


class FakeLibrary:
    """Minimal native library: a version accessor and an exposure entry point."""

    def __init__(
        self,
        version: str = "2.1.0",
        expose: Callable[[ExposureRegistry], None] | None = None,
    ) -> None:
        self.version = version
        self._expose = expose
        self.expose_calls = 0

    def print_version(self) -> str:
        return self.version

    def expose_core(self, registry: ExposureRegistry) -> dict[str, Any]:
        self.expose_calls += 1
        try:
            if self._expose is not None:
                self._expose(registry)
        except Exception as exc:
            return FfiResultBuilder.from_exception(exc)
        return FfiResultBuilder.ok(None)


@pytest.fixture
def bridge() -> NumericBridge:
    """A fresh bridge with the declared descriptors enabled."""

    b = NumericBridge()
    b.enable()
    for descriptor in DECLARED_DESCRIPTORS:
        b.enable_for_shape(descriptor.scalar, descriptor.shape)
    return b


@pytest.fixture
def registry(bridge: NumericBridge) -> ExposureRegistry:
    return ExposureRegistry(bridge, "fake_pywrap")


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings()


@pytest.fixture
def fresh_module() -> types.ModuleType:
    return types.ModuleType("fake_pywrap")


@pytest.fixture
def fake_library_cls() -> type[FakeLibrary]:
    return FakeLibrary
