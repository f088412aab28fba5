"""Load sequence for the host-facing module handle.

The sequence runs once per module object, synchronously, on the importing
thread:

    UNLOADED -> BRIDGE_READY -> VERSION_STAMPED -> EXPOSED -> READY
    (failure in any phase)                                -> LOAD_FAILED

Everything that ends up on the module is staged in a ``LoadTransaction`` and
attached in one step when the sequence succeeds. A failure in any phase
leaves the module namespace untouched and re-raises, which makes the import
fail. ``LOAD_FAILED`` is terminal; a failed module object is never retried.
"""

from __future__ import annotations

import importlib
import logging
import threading
import types
import weakref
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from .config import BridgeSettings
from .exposure import ExposureRegistry, register_all
from .numeric_bridge import DECLARED_DESCRIPTORS, NumericBridge, get_bridge
from .shared.error_codes import ErrorCode
from .shared.exceptions import (
    BridgeError,
    InitializationError,
    InternalError,
    RegistrationError,
)
from .version import compute_version_string

logger = logging.getLogger(__name__)


@runtime_checkable
class NativeLibrary(Protocol):
    """Interface a native library implements to be loaded by the bridge."""

    def print_version(self) -> str: ...

    def expose_core(self, registry: ExposureRegistry) -> Mapping[str, Any]: ...


class LoadState(str, Enum):
    UNLOADED = "unloaded"
    BRIDGE_READY = "bridge_ready"
    VERSION_STAMPED = "version_stamped"
    EXPOSED = "exposed"
    READY = "ready"
    LOAD_FAILED = "load_failed"


_TRANSITIONS: dict[LoadState, frozenset[LoadState]] = {
    LoadState.UNLOADED: frozenset({LoadState.BRIDGE_READY, LoadState.LOAD_FAILED}),
    LoadState.BRIDGE_READY: frozenset(
        {LoadState.VERSION_STAMPED, LoadState.LOAD_FAILED}
    ),
    LoadState.VERSION_STAMPED: frozenset({LoadState.EXPOSED, LoadState.LOAD_FAILED}),
    LoadState.EXPOSED: frozenset({LoadState.READY, LoadState.LOAD_FAILED}),
    LoadState.READY: frozenset(),
    LoadState.LOAD_FAILED: frozenset(),
}

# Initialization token: one state per module object, serialized by the lock.
_LOAD_LOCK = threading.RLock()
_LOAD_STATES: "weakref.WeakKeyDictionary[types.ModuleType, LoadState]" = (
    weakref.WeakKeyDictionary()
)


def load_state(module: types.ModuleType) -> LoadState:
    """Current load state of ``module`` (UNLOADED if never loaded)."""
    return _LOAD_STATES.get(module, LoadState.UNLOADED)


class BridgeModule(types.ModuleType):
    """Module class of a loaded handle.

    ``__version__``, ``__all__`` and every exposed name are read-only.
    """

    def _read_only_names(self) -> set[str]:
        return {"__version__", "__all__", *self.__dict__.get("__all__", ())}

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._read_only_names():
            raise AttributeError(
                f"cannot rebind read-only attribute {name!r} "
                f"of module {self.__name__!r}"
            )
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if name in self._read_only_names():
            raise AttributeError(
                f"cannot delete read-only attribute {name!r} "
                f"of module {self.__name__!r}"
            )
        super().__delattr__(name)


class LoadTransaction:
    """Scoped acquisition of a module namespace.

    Attributes staged inside the ``with`` block are attached together on a
    clean exit. On any exception, including one raised while attaching,
    nothing staged remains on the module.
    """

    def __init__(self, module: types.ModuleType) -> None:
        self.module = module
        self._staged: dict[str, Any] = {}
        self.committed = False

    @property
    def staged(self) -> tuple[str, ...]:
        return tuple(self._staged)

    def stage(self, name: str, value: Any) -> None:
        if name in self._staged or name in vars(self.module):
            raise RegistrationError(
                f"{name!r} already exists in module {self.module.__name__!r}",
                capability=name,
                error_code=ErrorCode.FFI_NAME_COLLISION,
            )
        self._staged[name] = value

    def __enter__(self) -> "LoadTransaction":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        if exc_type is None:
            self._commit()
        else:
            self._staged.clear()
        return False

    def _commit(self) -> None:
        namespace = vars(self.module)
        applied: list[str] = []
        try:
            for name, value in self._staged.items():
                namespace[name] = value
                applied.append(name)
            if type(self.module) is types.ModuleType:
                self.module.__class__ = BridgeModule
            elif not isinstance(self.module, BridgeModule):
                logger.debug(
                    f"{self.module.__name__}: custom module type "
                    f"{type(self.module).__name__}, attributes stay writable"
                )
        except Exception as exc:
            for name in applied:
                namespace.pop(name, None)
            raise RegistrationError(
                f"could not attach capabilities to {self.module.__name__!r}",
                native_error=repr(exc),
            ) from exc
        finally:
            self._staged.clear()
        self.committed = True


def resolve_native_library(path: str) -> NativeLibrary:
    """Import the native library module at ``path`` and check its interface."""
    try:
        library = importlib.import_module(path)
    except ImportError as exc:
        raise InitializationError(
            f"native library {path!r} could not be imported",
            native_error=str(exc),
            library=path,
        ) from exc

    missing = [
        name
        for name in ("print_version", "expose_core")
        if not callable(getattr(library, name, None))
    ]
    if missing:
        raise InitializationError(
            f"native library {path!r} does not provide {', '.join(missing)}",
            library=path,
        )
    return library


class LoadSequence:
    """One run of the load sequence against one module object."""

    def __init__(
        self,
        module: types.ModuleType,
        bridge: NumericBridge,
        settings: BridgeSettings,
        library: Optional[NativeLibrary] = None,
    ) -> None:
        self.module = module
        self.bridge = bridge
        self.settings = settings
        self.library = library
        self._state = LoadState.UNLOADED

    @property
    def state(self) -> LoadState:
        return self._state

    def _advance(self, new_state: LoadState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise InternalError(
                f"invalid load transition {self._state.value} -> {new_state.value}",
                error_code=ErrorCode.INVARIANT_VIOLATED,
            )
        logger.debug(f"{self.module.__name__}: {self._state.value} -> {new_state.value}")
        self._state = new_state
        _LOAD_STATES[self.module] = new_state

    def _enable_bridge(self) -> None:
        try:
            self.bridge.enable()
            for descriptor in DECLARED_DESCRIPTORS:
                self.bridge.enable_for_shape(
                    descriptor.scalar, descriptor.shape, descriptor.size
                )
        except InitializationError:
            raise
        except Exception as exc:
            raise InitializationError(
                f"numeric bridge setup failed: {exc}",
                native_error=repr(exc),
            ) from exc
        self._advance(LoadState.BRIDGE_READY)

    def run(self) -> types.ModuleType:
        name = self.module.__name__
        try:
            if self.library is None:
                self.library = resolve_native_library(self.settings.native_library)

            with LoadTransaction(self.module) as txn:
                self._enable_bridge()

                version = compute_version_string(self.library)
                txn.stage("__version__", version)
                self._advance(LoadState.VERSION_STAMPED)

                registry = ExposureRegistry(
                    self.bridge, name, strict_dtype=self.settings.strict_dtype
                )
                bindings = register_all(registry, self.library)
                for capability, value in bindings.items():
                    txn.stage(capability, value)
                txn.stage("__all__", sorted(bindings))
                self._advance(LoadState.EXPOSED)

            self._advance(LoadState.READY)
        except BridgeError as exc:
            self._fail()
            logger.error(f"Loading {name} failed: {exc}")
            raise
        except BaseException:
            self._fail()
            raise

        logger.info(
            f"Loaded {name} {version} with {len(bindings)} capabilities "
            f"({', '.join(str(d) for d in self.bridge.descriptors())})"
        )
        return self.module

    def _fail(self) -> None:
        self._state = LoadState.LOAD_FAILED
        _LOAD_STATES[self.module] = LoadState.LOAD_FAILED


def _apply_log_level(settings: BridgeSettings) -> None:
    if settings.log_level:
        logging.getLogger(__package__ or "ocp_bridge").setLevel(settings.log_level)


def load_module(
    module: types.ModuleType,
    library: Optional[NativeLibrary] = None,
    bridge: Optional[NumericBridge] = None,
    settings: Optional[BridgeSettings] = None,
) -> types.ModuleType:
    """Run the load sequence for ``module``.

    Args:
        module: The module handle to populate.
        library: Native library to expose; resolved from settings if None.
        bridge: Numeric bridge to use; the process-wide bridge if None.
        settings: Load settings; read from the environment if None.

    Returns:
        The loaded module.

    Raises:
        InitializationError: Bridge setup, library resolution or version
            stamping failed, or ``module`` already failed to load.
        RegistrationError: A capability could not be registered.
    """
    with _LOAD_LOCK:
        state = load_state(module)
        if state is LoadState.READY:
            logger.debug(f"{module.__name__} already loaded")
            return module
        if state is not LoadState.UNLOADED:
            raise InitializationError(
                f"module {module.__name__!r} is in state {state.value}; "
                "a failed load is not retried",
                error_code=ErrorCode.INVALID_STATE,
            )

        settings = settings or BridgeSettings.from_env()
        _apply_log_level(settings)
        sequence = LoadSequence(module, bridge or get_bridge(), settings, library)
        return sequence.run()


__all__ = [
    "BridgeModule",
    "LoadSequence",
    "LoadState",
    "LoadTransaction",
    "NativeLibrary",
    "load_module",
    "load_state",
    "resolve_native_library",
]
