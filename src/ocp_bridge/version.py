"""Version stamping for the module handle."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .shared.error_codes import ErrorCode
from .shared.exceptions import InitializationError

if TYPE_CHECKING:
    from .loader import NativeLibrary

# MAJOR.MINOR.PATCH[-prerelease][+build]
VERSION_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True)
class VersionInfo:
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "VersionInfo":
        match = VERSION_PATTERN.fullmatch(text)
        if match is None:
            raise ValueError(f"not a MAJOR.MINOR.PATCH version: {text!r}")
        return cls(
            int(match["major"]),
            int(match["minor"]),
            int(match["patch"]),
            match["prerelease"],
            match["build"],
        )

    @property
    def release(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def compute_version_string(library: "NativeLibrary") -> str:
    """Return the native library's version string, unchanged.

    The string must be exactly what the library's own accessor reports, so
    it is validated but never normalized.

    Raises:
        InitializationError: If the accessor fails or returns something that
            is not a ``MAJOR.MINOR.PATCH[-pre][+build]`` string.
    """
    try:
        version = library.print_version()
    except Exception as exc:
        raise InitializationError(
            "native library version accessor failed",
            native_error=repr(exc),
        ) from exc

    if not isinstance(version, str) or VERSION_PATTERN.fullmatch(version) is None:
        raise InitializationError(
            f"native library reported an invalid version: {version!r}",
            error_code=ErrorCode.FFI_BRIDGE_INIT_FAILED,
            reason=ErrorCode.INVALID_FORMAT.name,
        )
    return version


def is_compatible(version: str, required: str) -> bool:
    """Caret-style check: same major version and not older than ``required``.

    Pre-release and build metadata are ignored.

    Example:
        >>> is_compatible("1.4.2+abc", "1.3.0")
        True
        >>> is_compatible("2.0.0", "1.3.0")
        False
    """
    have = VersionInfo.parse(version)
    want = VersionInfo.parse(required)
    return have.major == want.major and have.release >= want.release


__all__ = [
    "VERSION_PATTERN",
    "VersionInfo",
    "compute_version_string",
    "is_compatible",
]
