"""Reference native library.

Implements the native library interface expected by the loader:

    print_version() -> str
    expose_core(registry) -> FfiResult dict

The catalog is deliberately small: a Euclidean state and quadratic
activation models, computing on the Arrow-backed dense types.
"""

from __future__ import annotations

from typing import Any

from ..exposure import ExposureRegistry
from ..shared.ffi_wrapper import FfiResultBuilder
from .expose import expose_activation, expose_state

VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0


def print_version() -> str:
    return f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"


def expose_core(registry: ExposureRegistry) -> dict[str, Any]:
    """Register every abstraction of the core, in a fixed order."""
    try:
        expose_state(registry)
        expose_activation(registry)
    except Exception as exc:
        return FfiResultBuilder.from_exception(exc)
    return FfiResultBuilder.ok(None)


__all__ = ["print_version", "expose_core"]
