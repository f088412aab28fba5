"""Quadratic activation models.

An activation maps a residual vector r to a scalar a(r) together with its
gradient Ar and Hessian Arr. Results are written into a data object created
by the model, so one model can serve several data buffers.
"""

from __future__ import annotations

from .. import dense
from ..dense import DenseMatrix, DenseVector
from .state import check_dimension, check_size


class ActivationDataQuad:
    """Buffers written by calc/calcDiff."""

    def __init__(self, nr: int) -> None:
        self.nr = nr
        self.a_value = 0.0
        self.Ar = DenseVector.zeros(nr)
        self.Arr = DenseMatrix.zeros(nr, nr)


class ActivationModelQuad:
    """a(r) = 0.5 * r^T r"""

    def __init__(self, nr: int) -> None:
        self.nr = check_dimension(nr, "nr")

    def createData(self) -> ActivationDataQuad:
        return ActivationDataQuad(self.nr)

    def calc(self, data: ActivationDataQuad, r: DenseVector) -> None:
        check_size(r, self.nr, "r")
        data.a_value = 0.5 * dense.dot(r, r)

    def calcDiff(self, data: ActivationDataQuad, r: DenseVector) -> None:
        check_size(r, self.nr, "r")
        data.Ar = r.copy()
        data.Arr = DenseMatrix.identity(self.nr)


class ActivationModelWeightedQuad:
    """a(r) = 0.5 * r^T diag(w) r"""

    def __init__(self, weights: DenseVector) -> None:
        self.nr = weights.size
        self._weights = weights.copy()

    @property
    def weights(self) -> DenseVector:
        return self._weights

    @weights.setter
    def weights(self, weights: DenseVector) -> None:
        check_size(weights, self.nr, "weights")
        self._weights = weights.copy()

    def createData(self) -> ActivationDataQuad:
        return ActivationDataQuad(self.nr)

    def calc(self, data: ActivationDataQuad, r: DenseVector) -> None:
        check_size(r, self.nr, "r")
        data.a_value = 0.5 * dense.dot(r, dense.multiply(self._weights, r))

    def calcDiff(self, data: ActivationDataQuad, r: DenseVector) -> None:
        check_size(r, self.nr, "r")
        data.Ar = dense.multiply(self._weights, r)
        data.Arr = DenseMatrix.diagonal(self._weights)
