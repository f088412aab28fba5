"""
config.py
---------
Load-time settings for the bridge.

Reads environment variables (a .env file in the working directory or one of
its parents is honored, existing variables win)
and validates them into a ``BridgeSettings`` model.

Environment variables:
  OCP_BRIDGE_NATIVE_LIBRARY=<dotted.module>   (Default: ocp_bridge.native)
  OCP_BRIDGE_STRICT_DTYPE=true|false          (Default: false)
  OCP_BRIDGE_LOG_LEVEL=CRITICAL|ERROR|WARNING|INFO|DEBUG
                                              (Default: unset, app decides)
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

NATIVE_LIBRARY_ENV = "OCP_BRIDGE_NATIVE_LIBRARY"
STRICT_DTYPE_ENV = "OCP_BRIDGE_STRICT_DTYPE"
LOG_LEVEL_ENV = "OCP_BRIDGE_LOG_LEVEL"

DEFAULT_NATIVE_LIBRARY = "ocp_bridge.native"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


# --- Helpers -------------------------------------------------------------------
def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _get_choice(name: str, choices: set[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip().upper()
    return raw if raw in choices else None


class BridgeSettings(BaseModel):
    """
    Settings consumed by the load sequence.

    Attributes:
        native_library: Dotted path of the module implementing the native
            library interface (``print_version`` and ``expose_core``).
        strict_dtype: Reject host arrays whose dtype is not exactly the
            bridged scalar type instead of safe-casting them.
        log_level: Level applied to the ``ocp_bridge`` logger, or None to
            leave logging configuration to the application.
    """

    native_library: str = Field(
        DEFAULT_NATIVE_LIBRARY, description="Dotted path of the native library"
    )
    strict_dtype: bool = Field(False, description="Only accept exact dtypes")
    log_level: Optional[str] = Field(None, description="ocp_bridge logger level")

    model_config = {"frozen": True}

    @field_validator("native_library")
    @classmethod
    def _check_module_path(cls, value: str) -> str:
        value = value.strip()
        parts = value.split(".")
        if not value or not all(part.isidentifier() for part in parts):
            raise ValueError(f"not a dotted module path: {value!r}")
        return value

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        """Build settings from the process environment (and .env)."""
        load_dotenv(find_dotenv(usecwd=True), override=False)
        return cls(
            native_library=os.getenv(NATIVE_LIBRARY_ENV, DEFAULT_NATIVE_LIBRARY),
            strict_dtype=_get_bool(STRICT_DTYPE_ENV, default=False),
            log_level=_get_choice(LOG_LEVEL_ENV, _LOG_LEVELS),
        )


__all__ = [
    "BridgeSettings",
    "DEFAULT_NATIVE_LIBRARY",
    "LOG_LEVEL_ENV",
    "NATIVE_LIBRARY_ENV",
    "STRICT_DTYPE_ENV",
]
