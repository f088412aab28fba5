"""Numeric bridge between numpy arrays and the native dense representation.

The bridge is an explicit registry of conversion adapters keyed by a
``TypeDescriptor`` (scalar type, shape class). Nothing converts implicitly:
a descriptor has to be enabled before any exposed abstraction can take or
return values of that type.

## Usage

```python
from ocp_bridge.numeric_bridge import (
    MatrixX, ScalarType, ShapeClass, VectorX,
    enable_bridge, enable_bridge_for_shape, get_bridge,
)

enable_bridge()
enable_bridge_for_shape(ScalarType.FLOAT64, ShapeClass.DYNAMIC_VECTOR)

native = get_bridge().from_host(np.arange(5.0), VectorX)   # DenseVector
host = get_bridge().to_host(native, VectorX)               # np.ndarray
```

## Conversion rules

| Descriptor shape | Accepted host input                               |
|------------------|---------------------------------------------------|
| DYNAMIC_VECTOR   | ndim 1, or ndim 2 with one axis of length 1       |
| FIXED_VECTOR     | as DYNAMIC_VECTOR, length must equal ``size``     |
| DYNAMIC_MATRIX   | ndim 2                                            |

Exact dtypes are always accepted. Other dtypes are cast when numpy's "safe"
casting allows it, unless strict dtype mode is requested for the call (or set
as the bridge default with ``strict_dtype``).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import numpy as np

from . import dense as _dense
from .dense import DenseMatrix, DenseVector
from .shared.error_codes import ErrorCode
from .shared.exceptions import ConversionError, InitializationError

logger = logging.getLogger(__name__)


# =============================================================================
# Type descriptors
# =============================================================================


class ScalarType(str, Enum):
    FLOAT64 = "float64"
    FLOAT32 = "float32"

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def arrow_type(self) -> Any:
        return _dense.pa.from_numpy_dtype(self.numpy_dtype)


class ShapeClass(str, Enum):
    DYNAMIC_VECTOR = "dynamic_vector"
    DYNAMIC_MATRIX = "dynamic_matrix"
    FIXED_VECTOR = "fixed_vector"


@dataclass(frozen=True)
class TypeDescriptor:
    """(scalar type, shape class) pair identifying one bridged numeric type."""

    scalar: ScalarType
    shape: ShapeClass
    size: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "scalar", ScalarType(self.scalar))
        object.__setattr__(self, "shape", ShapeClass(self.shape))
        if self.shape is ShapeClass.FIXED_VECTOR:
            if self.size is None or self.size <= 0:
                raise ValueError("FIXED_VECTOR descriptors need a positive size")
        elif self.size is not None:
            raise ValueError(f"{self.shape.value} descriptors take no size")

    @property
    def is_vector(self) -> bool:
        return self.shape in (ShapeClass.DYNAMIC_VECTOR, ShapeClass.FIXED_VECTOR)

    def __str__(self) -> str:
        if self.size is not None:
            return f"{self.scalar.value}[{self.shape.value}:{self.size}]"
        return f"{self.scalar.value}[{self.shape.value}]"


VectorX = TypeDescriptor(ScalarType.FLOAT64, ShapeClass.DYNAMIC_VECTOR)
MatrixX = TypeDescriptor(ScalarType.FLOAT64, ShapeClass.DYNAMIC_MATRIX)

# Descriptors enabled by the load sequence before any capability is exposed.
DECLARED_DESCRIPTORS: tuple[TypeDescriptor, ...] = (VectorX, MatrixX)


@dataclass(frozen=True)
class ConversionAdapter:
    """Registered conversion pair for one descriptor."""

    descriptor: TypeDescriptor
    to_host: Callable[[Any], np.ndarray]
    from_host: Callable[..., Any]


# =============================================================================
# Conversions
# =============================================================================


def _coerce_dtype(
    array: np.ndarray, descriptor: TypeDescriptor, strict: bool
) -> np.ndarray:
    target = descriptor.scalar.numpy_dtype
    if array.dtype == target:
        return array
    if strict:
        raise ConversionError(
            f"expected dtype {target}, got {array.dtype} (strict dtype mode)",
            descriptor=str(descriptor),
        )
    if not np.can_cast(array.dtype, target, casting="safe"):
        raise ConversionError(
            f"cannot safely cast {array.dtype} to {target}",
            descriptor=str(descriptor),
        )
    return array.astype(target)


def _check_native_dtype(value: Any, descriptor: TypeDescriptor) -> None:
    if value.dtype != descriptor.scalar.numpy_dtype:
        raise ConversionError(
            f"native value has dtype {value.dtype}, "
            f"expected {descriptor.scalar.value}",
            descriptor=str(descriptor),
        )


def _check_fixed_size(length: int, descriptor: TypeDescriptor) -> None:
    if descriptor.size is not None and length != descriptor.size:
        raise ConversionError(
            f"expected a vector of length {descriptor.size}, got {length}",
            descriptor=str(descriptor),
        )


def _vector_adapter(descriptor: TypeDescriptor) -> ConversionAdapter:
    def from_host(value: Any, strict: bool = False) -> DenseVector:
        if isinstance(value, DenseVector):
            _check_native_dtype(value, descriptor)
            _check_fixed_size(value.size, descriptor)
            return value
        if not isinstance(value, np.ndarray):
            raise ConversionError(
                f"expected numpy.ndarray, got {type(value).__name__}",
                descriptor=str(descriptor),
            )
        array = np.asarray(value)
        if array.ndim == 2 and 1 in array.shape:
            array = array.reshape(-1)
        elif array.ndim != 1:
            raise ConversionError(
                f"expected a vector, got array of shape {array.shape}",
                descriptor=str(descriptor),
            )
        _check_fixed_size(array.shape[0], descriptor)
        array = np.ascontiguousarray(_coerce_dtype(array, descriptor, strict))
        return DenseVector(_dense.pa.array(array, type=descriptor.scalar.arrow_type))

    def to_host(value: Any) -> np.ndarray:
        if not isinstance(value, DenseVector):
            raise ConversionError(
                f"native side returned {type(value).__name__}, expected DenseVector",
                descriptor=str(descriptor),
            )
        _check_native_dtype(value, descriptor)
        _check_fixed_size(value.size, descriptor)
        return value.view().copy()

    return ConversionAdapter(descriptor, to_host, from_host)


def _matrix_adapter(descriptor: TypeDescriptor) -> ConversionAdapter:
    def from_host(value: Any, strict: bool = False) -> DenseMatrix:
        if isinstance(value, DenseMatrix):
            _check_native_dtype(value, descriptor)
            return value
        if not isinstance(value, np.ndarray):
            raise ConversionError(
                f"expected numpy.ndarray, got {type(value).__name__}",
                descriptor=str(descriptor),
            )
        array = np.asarray(value)
        if array.ndim != 2:
            raise ConversionError(
                f"expected a 2-D array, got array of shape {array.shape}",
                descriptor=str(descriptor),
            )
        array = _coerce_dtype(array, descriptor, strict)
        rows, cols = array.shape
        values = _dense.pa.array(
            np.ravel(array, order="F"), type=descriptor.scalar.arrow_type
        )
        return DenseMatrix(rows, cols, values)

    def to_host(value: Any) -> np.ndarray:
        if not isinstance(value, DenseMatrix):
            raise ConversionError(
                f"native side returned {type(value).__name__}, expected DenseMatrix",
                descriptor=str(descriptor),
            )
        _check_native_dtype(value, descriptor)
        return value.view().copy(order="F")

    return ConversionAdapter(descriptor, to_host, from_host)


_ADAPTER_FACTORIES: dict[ShapeClass, Callable[[TypeDescriptor], ConversionAdapter]] = {
    ShapeClass.DYNAMIC_VECTOR: _vector_adapter,
    ShapeClass.FIXED_VECTOR: _vector_adapter,
    ShapeClass.DYNAMIC_MATRIX: _matrix_adapter,
}


def _probe_host_arrays() -> None:
    """Check that numpy and pyarrow are importable and share buffers."""
    if not _dense.PYARROW_AVAILABLE:
        raise ImportError("pyarrow is not installed")
    sample = np.arange(3, dtype=np.float64)
    back = _dense.pa.array(sample).to_numpy(zero_copy_only=False)
    if back.dtype != sample.dtype or not np.array_equal(back, sample):
        raise RuntimeError("numpy/pyarrow round trip returned different values")


# =============================================================================
# Bridge registry
# =============================================================================


class NumericBridge:
    """Registry of conversion adapters between host and native arrays.

    ``enable()`` must run before any descriptor is enabled. Both operations
    are idempotent.
    """

    def __init__(
        self,
        probe: Optional[Callable[[], None]] = None,
        strict_dtype: bool = False,
    ) -> None:
        self._probe = probe or _probe_host_arrays
        self._lock = threading.RLock()
        self._enabled = False
        self._adapters: dict[TypeDescriptor, ConversionAdapter] = {}
        self.strict_dtype = strict_dtype

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        """Enable host/native array conversion. Fatal if the runtime is missing."""
        with self._lock:
            if self._enabled:
                logger.debug("Numeric bridge already enabled")
                return
            try:
                self._probe()
            except Exception as exc:
                logger.error(f"Numeric bridge probe failed: {exc}")
                raise InitializationError(
                    "numeric bridge could not be enabled: "
                    "host array runtime unavailable",
                    native_error=str(exc),
                ) from exc
            self._enabled = True
            logger.debug("Numeric bridge enabled")

    def enable_for_shape(
        self,
        scalar: ScalarType | str,
        shape: ShapeClass | str,
        size: Optional[int] = None,
    ) -> TypeDescriptor:
        """Register the adapter for one (scalar, shape) pair."""
        descriptor = TypeDescriptor(ScalarType(scalar), ShapeClass(shape), size)
        with self._lock:
            if not self._enabled:
                raise InitializationError(
                    f"cannot enable {descriptor}: numeric bridge not enabled",
                    error_code=ErrorCode.FFI_BRIDGE_INIT_FAILED,
                    descriptor=str(descriptor),
                )
            if descriptor in self._adapters:
                logger.debug(f"Conversion for {descriptor} already enabled")
                return descriptor
            self._adapters[descriptor] = _ADAPTER_FACTORIES[descriptor.shape](
                descriptor
            )
            logger.debug(f"Enabled conversion for {descriptor}")
        return descriptor

    def is_enabled_for(self, descriptor: TypeDescriptor) -> bool:
        return descriptor in self._adapters

    def descriptors(self) -> tuple[TypeDescriptor, ...]:
        return tuple(self._adapters)

    def adapter_for(self, descriptor: TypeDescriptor) -> ConversionAdapter:
        try:
            return self._adapters[descriptor]
        except KeyError:
            raise ConversionError(
                f"no conversion enabled for {descriptor}",
                descriptor=str(descriptor),
                error_code=ErrorCode.FFI_UNSUPPORTED_TYPE,
            ) from None

    def from_host(
        self, value: Any, descriptor: TypeDescriptor, strict: Optional[bool] = None
    ) -> Any:
        if strict is None:
            strict = self.strict_dtype
        return self.adapter_for(descriptor).from_host(value, strict=strict)

    def to_host(self, value: Any, descriptor: TypeDescriptor) -> np.ndarray:
        return self.adapter_for(descriptor).to_host(value)


_DEFAULT_BRIDGE = NumericBridge()


def get_bridge() -> NumericBridge:
    """Return the process-wide bridge."""
    return _DEFAULT_BRIDGE


def enable_bridge() -> None:
    get_bridge().enable()


def enable_bridge_for_shape(
    scalar: ScalarType | str,
    shape: ShapeClass | str,
    size: Optional[int] = None,
) -> TypeDescriptor:
    return get_bridge().enable_for_shape(scalar, shape, size)


__all__ = [
    "ConversionAdapter",
    "DECLARED_DESCRIPTORS",
    "MatrixX",
    "NumericBridge",
    "ScalarType",
    "ShapeClass",
    "TypeDescriptor",
    "VectorX",
    "enable_bridge",
    "enable_bridge_for_shape",
    "get_bridge",
]
