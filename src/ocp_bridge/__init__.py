"""ocp_bridge - Python bindings for an optimal-control core.

The abstractions exposed by the native library live in ``ocp_bridge.pywrap``
and are re-exported here together with ``__version__``:

    >>> import numpy as np
    >>> import ocp_bridge
    >>> state = ocp_bridge.StateVector(5)
    >>> state.integrate(state.zero(), np.arange(5.0))
    array([0., 1., 2., 3., 4.])
"""

from . import pywrap as _pywrap
from .pywrap import *  # noqa: F401,F403
from .pywrap import __version__

__all__ = list(_pywrap.__all__)
