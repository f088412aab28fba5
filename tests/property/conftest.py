# -*- coding: utf-8 -*-
"""
Hypothesis Konfiguration und gemeinsame Strategien für Property-Tests.
"""
from __future__ import annotations

import numpy as np
from hypothesis import HealthCheck, Verbosity, settings
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

# ══════════════════════════════════════════════════════════════════════════════
# HYPOTHESIS PROFILE CONFIGURATION
# ══════════════════════════════════════════════════════════════════════════════

# Default Profile für normale Test-Runs
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    suppress_health_check=[
        HealthCheck.too_slow,
        HealthCheck.data_too_large,
    ],
)

# CI Profile mit mehr Examples
settings.register_profile(
    "ci",
    max_examples=500,
    verbosity=Verbosity.quiet,
    deadline=None,
    suppress_health_check=[
        HealthCheck.too_slow,
        HealthCheck.data_too_large,
    ],
)

# Debug Profile für Fehlersuche
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

# Dev Profile für schnelle Iteration
settings.register_profile(
    "dev",
    max_examples=25,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile("default")


# ══════════════════════════════════════════════════════════════════════════════
# STRATEGIES FÜR DENSE-WERTE
# ══════════════════════════════════════════════════════════════════════════════


def any_float64() -> st.SearchStrategy[float]:
    """Beliebige float64-Werte inklusive NaN, ±inf, ±0 und Subnormals."""
    return st.floats(allow_nan=True, allow_infinity=True, allow_subnormal=True)


@st.composite
def float64_vectors(draw: st.DrawFn, max_size: int = 64) -> np.ndarray:
    """1-D float64 Arrays beliebiger Länge (auch leer)."""
    n = draw(st.integers(min_value=0, max_value=max_size))
    return draw(arrays(np.float64, n, elements=any_float64()))


@st.composite
def float64_matrices(draw: st.DrawFn, max_side: int = 8) -> np.ndarray:
    """2-D float64 Arrays, C- oder Fortran-geordnet."""
    rows = draw(st.integers(min_value=0, max_value=max_side))
    cols = draw(st.integers(min_value=0, max_value=max_side))
    matrix = draw(arrays(np.float64, (rows, cols), elements=any_float64()))
    if draw(st.booleans()):
        matrix = np.asfortranarray(matrix)
    return matrix
