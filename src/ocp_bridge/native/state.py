"""Euclidean state vector."""

from __future__ import annotations

import numpy as np

from .. import dense
from ..dense import DenseMatrix, DenseVector
from ..shared.error_codes import ErrorCode
from ..shared.exceptions import ValidationError


def check_dimension(value: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValidationError(
            f"{field} must be an integer, got {type(value).__name__}",
            field=field,
            error_code=ErrorCode.TYPE_MISMATCH,
        )
    if value < 0:
        raise ValidationError(
            f"{field} must be non-negative, got {value}",
            field=field,
            error_code=ErrorCode.OUT_OF_BOUNDS,
        )
    return int(value)


def check_size(vector: DenseVector, expected: int, field: str) -> None:
    if vector.size != expected:
        raise ValidationError(
            f"{field} has dimension {vector.size}, expected {expected}",
            field=field,
            error_code=ErrorCode.SIZE_MISMATCH,
        )


class StateVector:
    """State whose points and tangents both live in R^nx.

    ``diff`` and ``integrate`` reduce to subtraction and addition, and their
    Jacobians are (negated) identities.
    """

    def __init__(self, nx: int) -> None:
        self.nx = check_dimension(nx, "nx")
        self.ndx = self.nx

    def zero(self) -> DenseVector:
        """Zero state."""
        return DenseVector.zeros(self.nx)

    def rand(self) -> DenseVector:
        """Random state drawn from a standard normal distribution."""
        return DenseVector.from_numpy(np.random.default_rng().standard_normal(self.nx))

    def diff(self, x0: DenseVector, x1: DenseVector) -> DenseVector:
        """Tangent dx such that integrate(x0, dx) == x1."""
        check_size(x0, self.nx, "x0")
        check_size(x1, self.nx, "x1")
        return dense.subtract(x1, x0)

    def integrate(self, x: DenseVector, dx: DenseVector) -> DenseVector:
        """State reached from x along dx."""
        check_size(x, self.nx, "x")
        check_size(dx, self.ndx, "dx")
        return dense.add(x, dx)

    def Jdiff(self, x0: DenseVector, x1: DenseVector) -> tuple[DenseMatrix, DenseMatrix]:
        """Jacobians of diff with respect to x0 and x1."""
        check_size(x0, self.nx, "x0")
        check_size(x1, self.nx, "x1")
        return (
            DenseMatrix.from_numpy(np.negative(np.eye(self.ndx))),
            DenseMatrix.identity(self.ndx),
        )

    def Jintegrate(
        self, x: DenseVector, dx: DenseVector
    ) -> tuple[DenseMatrix, DenseMatrix]:
        """Jacobians of integrate with respect to x and dx."""
        check_size(x, self.nx, "x")
        check_size(dx, self.ndx, "dx")
        return DenseMatrix.identity(self.ndx), DenseMatrix.identity(self.ndx)

    def __repr__(self) -> str:
        return f"StateVector(nx={self.nx})"
