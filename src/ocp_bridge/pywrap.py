"""Host-facing module of the optimal-control core.

Importing this module enables the numeric bridge, stamps ``__version__``
from the native library and exposes the library's abstractions here. The
load is all-or-nothing: if any phase fails the import raises and no
capability is visible.
"""

import sys

from .loader import load_module

load_module(sys.modules[__name__])
