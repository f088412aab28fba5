"""FFI Wrapper Utilities für Aufrufe in die native Bibliothek.

Die native Bibliothek meldet das Ergebnis ihres Exposure-Entry-Points als
FfiResult-Dict. Dieses Modul konvertiert solche Dicts automatisch zu
Python-Values oder Exceptions und baut sie auf der nativen Seite auf.
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from .error_codes import ErrorCode
from .exceptions import BridgeError

if TYPE_CHECKING:
    from collections.abc import Mapping

T = TypeVar("T")


def handle_ffi_result(result: Mapping[str, Any]) -> Any:
    """Konvertiert FFI-Result zu Python-Value oder Exception.

    Erwartet ein Dict/Mapping mit der FfiResult-Struktur:
        - ok: bool - Erfolg-Flag
        - value: Any - Rückgabewert (nur wenn ok=True)
        - error_code: int - Error-Code (nur wenn ok=False)
        - message: str - Fehlermeldung (nur wenn ok=False)
        - context: dict - Zusätzlicher Kontext (optional)

    Args:
        result: FfiResult-Dict der nativen Bibliothek

    Returns:
        value wenn ok=True

    Raises:
        RegistrationError: Bei Registrierungs-Codes (5007-5009)
        InitializationError: Bei FFI_BRIDGE_INIT_FAILED
        ValidationError / ComputationError / InternalError / FfiError:
            nach Code-Bereich
        BridgeError: Bei unbekannten Fehlern

    Example:
        >>> handle_ffi_result({"ok": True, "value": 42.0})
        42.0
    """
    if result.get("ok", False):
        return result.get("value")

    raise BridgeError.from_ffi_dict(
        {
            "error_code": result.get("error_code", ErrorCode.INTERNAL_ERROR),
            "message": result.get("message") or "Unknown FFI error",
            "context": dict(result.get("context") or {}),
        }
    )


def ffi_call(func: Callable[..., Mapping[str, Any]]) -> Callable[..., Any]:
    """Decorator für native Funktionen, die ein FfiResult-Dict zurückgeben.

    Example:
        >>> expose = ffi_call(library.expose_core)
        >>> expose(registry)  # wirft RegistrationError bei Fehler
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        result = func(*args, **kwargs)
        return handle_ffi_result(result)

    return wrapper


class FfiResultBuilder:
    """Builder für FfiResult-Dicts (native Seite).

    Example:
        >>> def expose_core(registry) -> dict:
        ...     try:
        ...         expose_state(registry)
        ...         return FfiResultBuilder.ok(None)
        ...     except Exception as e:
        ...         return FfiResultBuilder.from_exception(e)
    """

    @staticmethod
    def ok(value: T) -> dict[str, Any]:
        """Erstellt erfolgreiches FfiResult."""
        return {
            "ok": True,
            "value": value,
            "error_code": ErrorCode.OK,
            "message": None,
            "context": {},
        }

    @staticmethod
    def error(
        error_code: int | ErrorCode,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Erstellt Fehler-FfiResult.

        Args:
            error_code: Error-Code aus ErrorCode enum
            message: Menschenlesbare Fehlermeldung
            context: Zusätzlicher Kontext für Debugging
        """
        return {
            "ok": False,
            "value": None,
            "error_code": int(error_code),
            "message": message,
            "context": context or {},
        }

    @staticmethod
    def from_exception(exc: Exception) -> dict[str, Any]:
        """Erstellt FfiResult aus Exception.

        BridgeErrors behalten ihren Code; alle anderen Exceptions aus der
        Exposure-Phase gelten als Registrierungsfehler.
        """
        if isinstance(exc, BridgeError):
            return FfiResultBuilder.error(
                exc.error_code,
                exc.message,
                exc.context,
            )

        error_map: dict[type, ErrorCode] = {
            TypeError: ErrorCode.TYPE_MISMATCH,
            NotImplementedError: ErrorCode.NOT_IMPLEMENTED,
        }

        error_code = error_map.get(type(exc), ErrorCode.FFI_REGISTRATION_FAILED)
        return FfiResultBuilder.error(
            error_code,
            str(exc),
            {"exception_type": type(exc).__name__},
        )


__all__ = [
    "handle_ffi_result",
    "ffi_call",
    "FfiResultBuilder",
]
