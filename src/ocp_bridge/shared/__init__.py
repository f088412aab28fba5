"""Shared, implementation-agnostic types for the host/native boundary.

Submodules:
    error_codes: Error codes shared with native libraries
    exceptions: Bridge exception hierarchy
    ffi_wrapper: FfiResult handling for calls into the native library
"""

from .error_codes import ErrorCode, error_category
from .exceptions import (
    BridgeError,
    ComputationError,
    ConversionError,
    FfiError,
    InitializationError,
    InternalError,
    RegistrationError,
    ValidationError,
)
from .ffi_wrapper import FfiResultBuilder, ffi_call, handle_ffi_result

__all__ = [
    "ErrorCode",
    "error_category",
    "BridgeError",
    "ComputationError",
    "ConversionError",
    "FfiError",
    "InitializationError",
    "InternalError",
    "RegistrationError",
    "ValidationError",
    "FfiResultBuilder",
    "ffi_call",
    "handle_ffi_result",
]
