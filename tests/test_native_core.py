"""Tests for the reference core, through the host classes and natively."""

from __future__ import annotations

import numpy as np
import pytest

import ocp_bridge
from ocp_bridge import dense
from ocp_bridge.dense import DenseMatrix, DenseVector
from ocp_bridge.exposure import ExposureRegistry
from ocp_bridge.native import expose_core, print_version
from ocp_bridge.native.state import StateVector as NativeStateVector
from ocp_bridge.shared.error_codes import ErrorCode
from ocp_bridge.shared.exceptions import ConversionError, ValidationError


class TestStateVector:
    def test_dimensions(self) -> None:
        state = ocp_bridge.StateVector(4)
        assert state.nx == 4
        assert state.ndx == 4

    def test_zero_and_rand(self) -> None:
        state = ocp_bridge.StateVector(3)
        np.testing.assert_array_equal(state.zero(), np.zeros(3))
        x = state.rand()
        assert x.shape == (3,)
        assert x.dtype == np.float64

    def test_diff_integrate(self) -> None:
        state = ocp_bridge.StateVector(3)
        x0 = np.array([1.0, 2.0, 3.0])
        x1 = np.array([0.0, 4.0, -1.0])
        dx = state.diff(x0, x1)
        np.testing.assert_array_equal(dx, [-1.0, 2.0, -4.0])
        np.testing.assert_array_equal(state.integrate(x0, dx), x1)

    def test_jacobians(self) -> None:
        state = ocp_bridge.StateVector(2)
        x = np.zeros(2)
        Jfirst, Jsecond = state.Jdiff(x, x)
        np.testing.assert_array_equal(Jfirst, -np.eye(2))
        np.testing.assert_array_equal(Jsecond, np.eye(2))
        Jx, Jdx = state.Jintegrate(x, x)
        np.testing.assert_array_equal(Jx, np.eye(2))
        np.testing.assert_array_equal(Jdx, np.eye(2))

    def test_size_mismatch(self) -> None:
        state = ocp_bridge.StateVector(3)
        with pytest.raises(ValidationError) as exc_info:
            state.integrate(np.zeros(3), np.zeros(2))
        assert exc_info.value.error_code == ErrorCode.SIZE_MISMATCH
        assert exc_info.value.field == "dx"

    @pytest.mark.parametrize(
        "nx,code",
        [
            (-1, ErrorCode.OUT_OF_BOUNDS),
            (2.5, ErrorCode.TYPE_MISMATCH),
            (True, ErrorCode.TYPE_MISMATCH),
        ],
    )
    def test_invalid_dimension(self, nx: object, code: ErrorCode) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ocp_bridge.StateVector(nx)
        assert exc_info.value.error_code == code

    def test_non_array_argument(self) -> None:
        state = ocp_bridge.StateVector(2)
        with pytest.raises(ConversionError):
            state.integrate([0.0, 0.0], np.zeros(2))

    def test_repr(self) -> None:
        assert repr(NativeStateVector(3)) == "StateVector(nx=3)"


class TestActivationModelQuad:
    def test_calc(self) -> None:
        model = ocp_bridge.ActivationModelQuad(3)
        data = model.createData()
        assert isinstance(data, ocp_bridge.ActivationDataQuad)
        r = np.array([1.0, 2.0, 2.0])
        model.calc(data, r)
        assert data.a_value == pytest.approx(4.5)

    def test_calc_diff(self) -> None:
        model = ocp_bridge.ActivationModelQuad(2)
        data = model.createData()
        r = np.array([3.0, -1.0])
        model.calcDiff(data, r)
        np.testing.assert_array_equal(data.Ar, r)
        np.testing.assert_array_equal(data.Arr, np.eye(2))

    def test_gradient_does_not_alias_input(self) -> None:
        model = ocp_bridge.ActivationModelQuad(2)
        data = model.createData()
        r = np.array([3.0, -1.0])
        model.calcDiff(data, r)
        r[0] = 100.0
        np.testing.assert_array_equal(data.Ar, [3.0, -1.0])

    def test_fresh_data(self) -> None:
        data = ocp_bridge.ActivationModelQuad(2).createData()
        assert data.a_value == 0.0
        np.testing.assert_array_equal(data.Ar, np.zeros(2))
        np.testing.assert_array_equal(data.Arr, np.zeros((2, 2)))

    def test_data_not_constructible(self) -> None:
        with pytest.raises(TypeError):
            ocp_bridge.ActivationDataQuad()

    def test_data_read_only(self) -> None:
        data = ocp_bridge.ActivationModelQuad(1).createData()
        with pytest.raises(AttributeError):
            data.a_value = 1.0

    def test_wrong_data_object(self) -> None:
        model = ocp_bridge.ActivationModelQuad(1)
        with pytest.raises(ConversionError):
            model.calc(object(), np.zeros(1))


class TestActivationModelWeightedQuad:
    def test_calc_and_diff(self) -> None:
        weights = np.array([1.0, 2.0, 0.5])
        model = ocp_bridge.ActivationModelWeightedQuad(weights)
        assert model.nr == 3
        data = model.createData()
        r = np.array([2.0, 1.0, 4.0])
        model.calc(data, r)
        assert data.a_value == pytest.approx(0.5 * (4.0 + 2.0 + 8.0))
        model.calcDiff(data, r)
        np.testing.assert_array_equal(data.Ar, [2.0, 2.0, 2.0])
        np.testing.assert_array_equal(data.Arr, np.diag(weights))

    def test_weights_writable(self) -> None:
        model = ocp_bridge.ActivationModelWeightedQuad(np.ones(2))
        model.weights = np.array([3.0, 4.0])
        np.testing.assert_array_equal(model.weights, [3.0, 4.0])
        with pytest.raises(ValidationError):
            model.weights = np.ones(3)

    def test_weights_owned_by_model(self) -> None:
        """Later writes to the host array do not reach the model."""
        w = np.array([1.0, 2.0, 3.0])
        model = ocp_bridge.ActivationModelWeightedQuad(w)
        w[:] = 100.0
        np.testing.assert_array_equal(model.weights, [1.0, 2.0, 3.0])

        replacement = np.array([4.0, 5.0, 6.0])
        model.weights = replacement
        replacement[:] = -1.0
        np.testing.assert_array_equal(model.weights, [4.0, 5.0, 6.0])

        data = model.createData()
        r = np.ones(3)
        model.calc(data, r)
        assert data.a_value == pytest.approx(7.5)
        model.calcDiff(data, r)
        np.testing.assert_array_equal(data.Arr, np.diag([4.0, 5.0, 6.0]))

    def test_nr_read_only(self) -> None:
        model = ocp_bridge.ActivationModelWeightedQuad(np.ones(2))
        with pytest.raises(AttributeError):
            model.nr = 4


class TestNativeLibrary:
    def test_print_version(self) -> None:
        assert print_version() == ocp_bridge.__version__

    def test_expose_core_reports_errors_as_result(
        self, registry: ExposureRegistry
    ) -> None:
        assert expose_core(registry)["ok"] is True
        result = expose_core(registry)
        assert result["ok"] is False
        assert result["error_code"] == ErrorCode.FFI_NAME_COLLISION

    def test_dense_kernels(self) -> None:
        a = DenseVector.from_numpy(np.array([1.0, 2.0]))
        b = DenseVector.from_numpy(np.array([3.0, 4.0]))
        assert dense.dot(a, b) == 11.0
        assert dense.dot(DenseVector.zeros(0), DenseVector.zeros(0)) == 0.0
        np.testing.assert_array_equal(dense.multiply(a, b).view(), [3.0, 8.0])

    def test_dense_matrix_validation(self) -> None:
        with pytest.raises(ValueError):
            DenseMatrix(2, 2, DenseVector.zeros(3).values)
        with pytest.raises(TypeError):
            DenseVector([1.0, 2.0])
