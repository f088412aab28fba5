"""Exposure of the reference core.

Each ``expose_*`` function registers one group of abstractions. They are
called in a fixed order by ``expose_core``; data classes come before the
models that return them.
"""

from __future__ import annotations

from typing import Any

from ..exposure import NO_INIT, ClassBuilder, ExposureRegistry
from ..numeric_bridge import MatrixX, VectorX
from .activation import (
    ActivationDataQuad,
    ActivationModelQuad,
    ActivationModelWeightedQuad,
)
from .state import StateVector


def expose_state(registry: ExposureRegistry) -> None:
    (
        registry.class_(
            "StateVector",
            StateVector,
            init=(None,),
            doc="Euclidean state model. StateVector(nx) creates a state of dimension nx.",
        )
        .def_("zero", returns=VectorX)
        .def_("rand", returns=VectorX)
        .def_("diff", args=(VectorX, VectorX), returns=VectorX)
        .def_("integrate", args=(VectorX, VectorX), returns=VectorX)
        .def_("Jdiff", args=(VectorX, VectorX), returns=(MatrixX, MatrixX))
        .def_("Jintegrate", args=(VectorX, VectorX), returns=(MatrixX, MatrixX))
        .add_property("nx", doc="dimension of the state")
        .add_property("ndx", doc="dimension of the tangent space")
    )


def _activation_model(
    registry: ExposureRegistry, name: str, native_class: type, init: Any
) -> ClassBuilder:
    return (
        registry.class_(name, native_class, init=init)
        .def_("createData", returns=ActivationDataQuad)
        .def_("calc", args=(ActivationDataQuad, VectorX))
        .def_("calcDiff", args=(ActivationDataQuad, VectorX))
        .add_property("nr", doc="dimension of the residual vector")
    )


def expose_activation(registry: ExposureRegistry) -> None:
    (
        registry.class_("ActivationDataQuad", ActivationDataQuad, init=NO_INIT)
        .add_property("a_value", doc="activation value")
        .add_property("Ar", VectorX, doc="activation gradient")
        .add_property("Arr", MatrixX, doc="activation Hessian")
    )
    _activation_model(registry, "ActivationModelQuad", ActivationModelQuad, (None,))
    _activation_model(
        registry,
        "ActivationModelWeightedQuad",
        ActivationModelWeightedQuad,
        (VectorX,),
    ).add_property(
        "weights", VectorX, writable=True, doc="weights of the quadratic term"
    )
