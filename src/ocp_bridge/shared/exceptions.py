"""Exception-Hierarchie für die Host/Native-Grenze.

Diese Exceptions werden an der Bridge-Grenze in strukturierte Fehler
konvertiert und können aus FfiResult-Dicts der nativen Bibliothek
zurück in Exceptions transformiert werden.

Die Lade-Sequenz kennt genau zwei fatale Fehlerarten:
    InitializationError: numerische Bridge oder native Bibliothek nicht nutzbar
    RegistrationError:   Capability konnte nicht registriert werden
"""

from __future__ import annotations

from typing import Any

from .error_codes import REGISTRATION_CODES, ErrorCode, error_category


class BridgeError(Exception):
    """Basis-Exception für alle Bridge-Fehler.

    Attributes:
        message: Menschenlesbare Fehlermeldung
        error_code: Numerischer Error-Code (siehe ErrorCode enum)
        context: Dict mit zusätzlichem Kontext für Debugging

    Example:
        >>> try:
        ...     raise BridgeError("Something went wrong", error_code=4000)
        ... except BridgeError as e:
        ...     log.error(f"[{e.error_code}] {e.message}", extra=e.context)
    """

    def __init__(
        self,
        message: str,
        error_code: int | ErrorCode = ErrorCode.INTERNAL_ERROR,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = int(error_code)
        self.context = context or {}

    def __str__(self) -> str:
        """String-Repräsentation mit Error-Code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"context={self.context!r})"
        )

    @property
    def category(self) -> str:
        """Fehler-Kategorie basierend auf error_code."""
        return error_category(self.error_code)

    def to_ffi_dict(self) -> dict[str, Any]:
        """Konvertiert Exception zu FFI-kompatiblem Dict.

        Returns:
            Dict mit keys: ok, error_code, message, context, category
        """
        return {
            "ok": False,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "category": self.category,
        }

    @classmethod
    def from_ffi_dict(cls, data: dict[str, Any]) -> "BridgeError":
        """Erstellt Exception aus FFI-Dict.

        Args:
            data: Dict mit error_code, message, context

        Returns:
            Passende BridgeError Subclass basierend auf error_code
        """
        error_code = data.get("error_code", ErrorCode.INTERNAL_ERROR)
        message = data.get("message", "Unknown error")
        context = dict(data.get("context") or {})

        exception_class = _get_exception_class(error_code)
        if exception_class is BridgeError:
            return BridgeError(message, error_code=error_code, context=context)
        return exception_class(message, error_code=error_code, **context)


class ValidationError(BridgeError):
    """Input-Validierungsfehler.

    Für ungültige Argumente an native Abstraktionen, z.B. Vektoren mit
    falscher Dimension.

    Attributes:
        field: Name des fehlerhaften Arguments (optional)
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        error_code: int | ErrorCode = ErrorCode.VALIDATION_FAILED,
        **context: Any,
    ) -> None:
        if field:
            context["field"] = field
        super().__init__(message, error_code=error_code, context=context)
        self.field = field


class ComputationError(BridgeError):
    """Berechnungsfehler in der nativen Bibliothek.

    Attributes:
        operation: Name der fehlgeschlagenen Operation (optional)
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        error_code: int | ErrorCode = ErrorCode.COMPUTATION_FAILED,
        **context: Any,
    ) -> None:
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code=error_code, context=context)
        self.operation = operation


class InternalError(BridgeError):
    """Interne Fehler (Bugs).

    Für Fehler die nicht auftreten sollten, z.B. ein ungültiger
    Zustandsübergang der Lade-Sequenz.
    """

    def __init__(
        self,
        message: str,
        error_code: int | ErrorCode = ErrorCode.INTERNAL_ERROR,
        **context: Any,
    ) -> None:
        super().__init__(message, error_code=error_code, context=context)


class FfiError(BridgeError):
    """Fehler an der Bridge-Grenze.

    Attributes:
        native_error: Original-Fehlermeldung der nativen Seite (optional)
    """

    def __init__(
        self,
        message: str,
        native_error: str | None = None,
        error_code: int | ErrorCode = ErrorCode.FFI_ERROR,
        **context: Any,
    ) -> None:
        if native_error:
            context["native_error"] = native_error
        super().__init__(message, error_code=error_code, context=context)
        self.native_error = native_error


class InitializationError(FfiError):
    """Numerische Bridge oder native Bibliothek konnte nicht initialisiert werden.

    Bricht die Lade-Sequenz ab; es gibt keinen degradierten Modus.
    """

    def __init__(
        self,
        message: str,
        native_error: str | None = None,
        error_code: int | ErrorCode = ErrorCode.FFI_BRIDGE_INIT_FAILED,
        **context: Any,
    ) -> None:
        super().__init__(
            message, native_error=native_error, error_code=error_code, **context
        )


class RegistrationError(FfiError):
    """Capability konnte nicht im Modul-Namespace registriert werden.

    Attributes:
        capability: Name der betroffenen Capability (optional)
    """

    def __init__(
        self,
        message: str,
        capability: str | None = None,
        native_error: str | None = None,
        error_code: int | ErrorCode = ErrorCode.FFI_REGISTRATION_FAILED,
        **context: Any,
    ) -> None:
        if capability:
            context["capability"] = capability
        super().__init__(
            message, native_error=native_error, error_code=error_code, **context
        )
        self.capability = capability


class ConversionError(FfiError):
    """Wert konnte nicht über die numerische Bridge konvertiert werden.

    Attributes:
        descriptor: Beschreibung des erwarteten numerischen Typs (optional)
    """

    def __init__(
        self,
        message: str,
        descriptor: str | None = None,
        error_code: int | ErrorCode = ErrorCode.FFI_TYPE_CONVERSION,
        **context: Any,
    ) -> None:
        if descriptor:
            context["descriptor"] = descriptor
        super().__init__(message, error_code=error_code, **context)
        self.descriptor = descriptor


def _get_exception_class(error_code: int) -> type[BridgeError]:
    """Ermittelt Exception-Klasse basierend auf Error-Code.

    Spezifische FFI-Codes werden vor den Bereichen geprüft.
    """
    if error_code in REGISTRATION_CODES:
        return RegistrationError
    if error_code == ErrorCode.FFI_BRIDGE_INIT_FAILED:
        return InitializationError
    if error_code == ErrorCode.FFI_TYPE_CONVERSION:
        return ConversionError

    if 1000 <= error_code < 2000:
        return ValidationError
    elif 2000 <= error_code < 3000:
        return ComputationError
    elif 4000 <= error_code < 5000:
        return InternalError
    elif 5000 <= error_code < 6000:
        return FfiError
    else:
        return BridgeError


__all__ = [
    "BridgeError",
    "ValidationError",
    "ComputationError",
    "InternalError",
    "FfiError",
    "InitializationError",
    "RegistrationError",
    "ConversionError",
]
