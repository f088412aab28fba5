"""Arrow-backed dense vectors and matrices.

This is the native dense-linear-algebra representation: the numeric bridge
converts to and from it, native libraries compute on it. Values live in a
single Arrow buffer so that contiguous numpy memory can be wrapped without
copying.

Layout:
    DenseVector:  values[n]                      float, no nulls
    DenseMatrix:  values[rows * cols]            float, no nulls, column-major
                  element (i, j) at values[i + j * rows]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .shared.error_codes import ErrorCode
from .shared.exceptions import ValidationError

# pyarrow is a core dependency (pyproject.toml). PYARROW_AVAILABLE is checked
# by the bridge probe; a broken install fails the load with InitializationError.
try:
    import pyarrow as pa
    import pyarrow.compute as pc

    PYARROW_AVAILABLE = True
except ImportError:
    PYARROW_AVAILABLE = False
    pa = None
    pc = None


def _ensure_pyarrow() -> None:
    """Raise ImportError if pyarrow is not available."""
    if not PYARROW_AVAILABLE:
        raise ImportError(
            "pyarrow is required for the native dense representation. "
            "Install with: pip install pyarrow>=14.0"
        )


def _check_values(values: Any) -> None:
    if not isinstance(values, pa.Array):
        raise TypeError(f"expected pyarrow.Array, got {type(values).__name__}")
    if not pa.types.is_floating(values.type):
        raise TypeError(f"expected a floating point array, got {values.type}")
    if values.null_count:
        raise ValueError("dense values must not contain nulls")


@dataclass(frozen=True)
class DenseVector:
    """Dynamic-length column vector."""

    values: Any

    def __post_init__(self) -> None:
        _ensure_pyarrow()
        _check_values(self.values)

    @property
    def size(self) -> int:
        return len(self.values)

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.values.type.to_pandas_dtype())

    def __len__(self) -> int:
        return self.size

    def view(self) -> np.ndarray:
        """Read-only numpy view of the values (no copy for float buffers)."""
        return self.values.to_numpy(zero_copy_only=False)

    def copy(self) -> "DenseVector":
        return DenseVector.from_numpy(self.view().copy())

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> "DenseVector":
        _ensure_pyarrow()
        return cls(pa.array(np.ascontiguousarray(array).reshape(-1)))

    @classmethod
    def zeros(cls, n: int) -> "DenseVector":
        return cls.from_numpy(np.zeros(n, dtype=np.float64))


@dataclass(frozen=True)
class DenseMatrix:
    """Dynamic-by-dynamic matrix stored column-major."""

    rows: int
    cols: int
    values: Any

    def __post_init__(self) -> None:
        _ensure_pyarrow()
        _check_values(self.values)
        if self.rows < 0 or self.cols < 0:
            raise ValueError(f"invalid matrix shape ({self.rows}, {self.cols})")
        if len(self.values) != self.rows * self.cols:
            raise ValueError(
                f"matrix ({self.rows}, {self.cols}) needs "
                f"{self.rows * self.cols} values, got {len(self.values)}"
            )

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.values.type.to_pandas_dtype())

    def view(self) -> np.ndarray:
        """Read-only (rows, cols) numpy view in Fortran order."""
        flat = self.values.to_numpy(zero_copy_only=False)
        return flat.reshape((self.rows, self.cols), order="F")

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> "DenseMatrix":
        _ensure_pyarrow()
        rows, cols = array.shape
        return cls(rows, cols, pa.array(np.ravel(array, order="F")))

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "DenseMatrix":
        return cls.from_numpy(np.zeros((rows, cols), dtype=np.float64))

    @classmethod
    def identity(cls, n: int) -> "DenseMatrix":
        return cls.from_numpy(np.eye(n, dtype=np.float64))

    @classmethod
    def diagonal(cls, diag: DenseVector) -> "DenseMatrix":
        return cls.from_numpy(np.diag(diag.view()))


# =============================================================================
# Elementwise kernels
# =============================================================================


def _same_size(a: DenseVector, b: DenseVector, operation: str) -> None:
    if a.size != b.size:
        raise ValidationError(
            f"{operation}: size mismatch ({a.size} vs {b.size})",
            error_code=ErrorCode.SIZE_MISMATCH,
        )


def add(a: DenseVector, b: DenseVector) -> DenseVector:
    _same_size(a, b, "add")
    return DenseVector(pc.add(a.values, b.values))


def subtract(a: DenseVector, b: DenseVector) -> DenseVector:
    _same_size(a, b, "subtract")
    return DenseVector(pc.subtract(a.values, b.values))


def multiply(a: DenseVector, b: DenseVector) -> DenseVector:
    _same_size(a, b, "multiply")
    return DenseVector(pc.multiply(a.values, b.values))


def dot(a: DenseVector, b: DenseVector) -> float:
    _same_size(a, b, "dot")
    if a.size == 0:
        return 0.0
    return float(pc.sum(pc.multiply(a.values, b.values)).as_py())


__all__ = [
    "PYARROW_AVAILABLE",
    "DenseVector",
    "DenseMatrix",
    "add",
    "subtract",
    "multiply",
    "dot",
]
