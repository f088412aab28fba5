"""Error Codes für die Host/Native-Grenze.

Diese Error-Codes werden an der Bridge-Grenze verwendet (Python ↔ native
Optimal-Control-Bibliothek). Native Bibliotheken melden Fehler aus dem
Exposure-Entry-Point als FfiResult-Dict mit einem dieser Codes.

Die numerischen Werte sind Teil des Vertrags mit der nativen Seite und
dürfen nicht umnummeriert werden.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Error Codes für die Host/Native-Grenze.

    Code-Bereiche:
        0:          Erfolg (kein Fehler)
        1000-1999:  Validation Errors
        2000-2999:  Computation Errors
        4000-4999:  Internal Errors (Bugs)
        5000-5999:  FFI Errors
    """

    # =========================================================================
    # Success (0)
    # =========================================================================
    OK = 0

    # =========================================================================
    # Validation Errors (1000-1999) - Input-Validierungsfehler
    # =========================================================================
    VALIDATION_FAILED = 1000
    """Allgemeiner Validierungsfehler."""

    INVALID_ARGUMENT = 1001
    """Ungültiges Argument an Funktion übergeben."""

    OUT_OF_BOUNDS = 1003
    """Index oder Wert außerhalb gültiger Grenzen."""

    TYPE_MISMATCH = 1004
    """Typ-Inkompatibilität (z.B. float erwartet, str erhalten)."""

    INVALID_STATE = 1007
    """Objekt/System in ungültigem Zustand für Operation."""

    INVALID_FORMAT = 1009
    """Format-Fehler (z.B. ungültiger Versionsstring)."""

    SIZE_MISMATCH = 1011
    """Vektoren/Matrizen haben inkompatible Dimensionen."""

    # =========================================================================
    # Computation Errors (2000-2999) - Berechnungsfehler
    # =========================================================================
    COMPUTATION_FAILED = 2000
    """Allgemeiner Berechnungsfehler."""

    # =========================================================================
    # Internal Errors (4000-4999) - Interne Fehler (Bugs)
    # =========================================================================
    INTERNAL_ERROR = 4000
    """Allgemeiner interner Fehler (Bug)."""

    NOT_IMPLEMENTED = 4001
    """Feature/Funktion nicht implementiert."""

    INVARIANT_VIOLATED = 4004
    """Interne Invariante verletzt (z.B. ungültiger Zustandsübergang)."""

    # =========================================================================
    # FFI Errors (5000-5999) - Fehler an der Bridge-Grenze
    # =========================================================================
    FFI_ERROR = 5000
    """Allgemeiner FFI-Fehler."""

    FFI_TYPE_CONVERSION = 5001
    """Typ-Konvertierung über die Bridge-Grenze fehlgeschlagen."""

    FFI_BRIDGE_INIT_FAILED = 5006
    """Numerische Bridge oder native Bibliothek nicht initialisierbar."""

    FFI_REGISTRATION_FAILED = 5007
    """Capability konnte nicht im Modul-Namespace registriert werden."""

    FFI_NAME_COLLISION = 5008
    """Name im Modul-Namespace bereits vergeben oder reserviert."""

    FFI_UNSUPPORTED_TYPE = 5009
    """Signatur referenziert einen nicht freigeschalteten numerischen Typ."""


REGISTRATION_CODES: frozenset[int] = frozenset(
    {
        ErrorCode.FFI_REGISTRATION_FAILED,
        ErrorCode.FFI_NAME_COLLISION,
        ErrorCode.FFI_UNSUPPORTED_TYPE,
    }
)


def error_category(code: ErrorCode | int) -> str:
    """Gibt die Kategorie eines Error-Codes zurück.

    Args:
        code: Error-Code

    Returns:
        Kategorie-Name als String
    """
    code_int = int(code)

    if code_int == 0:
        return "OK"
    elif 1000 <= code_int < 2000:
        return "VALIDATION"
    elif 2000 <= code_int < 3000:
        return "COMPUTATION"
    elif 4000 <= code_int < 5000:
        return "INTERNAL"
    elif 5000 <= code_int < 6000:
        return "FFI"
    else:
        return "UNKNOWN"


__all__ = [
    "ErrorCode",
    "REGISTRATION_CODES",
    "error_category",
]
