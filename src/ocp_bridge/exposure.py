"""Capability exposure registry.

A native library publishes its abstractions by filling an
``ExposureRegistry`` from its exposure entry point:

```python
def expose_core(registry: ExposureRegistry) -> dict:
    (
        registry.class_("StateVector", StateVector, init=(None,))
        .def_("zero", returns=VectorX)
        .def_("integrate", args=(VectorX, VectorX), returns=VectorX)
        .add_property("nx")
    )
    return FfiResultBuilder.ok(None)
```

The registry generates one host class per native class. Generated methods
marshal their arguments host -> native and their results native -> host
according to the declared specs:

| Spec                 | Host value              | Native value         |
|----------------------|-------------------------|----------------------|
| ``None``             | passed through          | passed through       |
| ``TypeDescriptor``   | numpy.ndarray           | DenseVector/Matrix   |
| exposed native class | generated host object   | native instance      |
| ``SequenceOf(spec)`` | list                    | list                 |
| ``(spec, ...)``      | tuple (results only)    | tuple                |

Every descriptor is resolved against the numeric bridge when it is declared,
so exposure fails with ``RegistrationError`` if the bridge was not set up
first. The registry only stages bindings; attaching them to the module is
the loader's job.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional

from .numeric_bridge import NumericBridge, TypeDescriptor
from .shared.error_codes import ErrorCode
from .shared.exceptions import (
    BridgeError,
    ConversionError,
    InternalError,
    RegistrationError,
)
from .shared.ffi_wrapper import ffi_call

if TYPE_CHECKING:
    from .loader import NativeLibrary

logger = logging.getLogger(__name__)

RESERVED_NAMES = frozenset({"__version__", "__all__"})


class _NoInit:
    def __repr__(self) -> str:
        return "NO_INIT"


NO_INIT: Any = _NoInit()
"""Marks a class that can only be obtained from other native calls."""


@dataclass(frozen=True)
class SequenceOf:
    """Spec for a list whose elements all follow ``element``."""

    element: Any


class HostObject:
    """Base of every host class generated by the registry."""

    __slots__ = ("_native",)

    _native_class: ClassVar[type]

    @classmethod
    def _from_native(cls, native: Any) -> "HostObject":
        obj = cls.__new__(cls)
        obj._native = native
        return obj

    def __repr__(self) -> str:
        return f"<{type(self).__module__}.{type(self).__qualname__} object>"


class _Marshaler:
    """Applies marshaling specs in both directions."""

    def __init__(
        self,
        bridge: NumericBridge,
        host_classes: dict[type, type[HostObject]],
        strict_dtype: Optional[bool] = None,
    ) -> None:
        self._bridge = bridge
        self._host_classes = host_classes
        self._strict_dtype = strict_dtype

    def arguments(
        self, qualname: str, values: tuple[Any, ...], specs: Optional[tuple]
    ) -> tuple[Any, ...]:
        if specs is None:
            return values
        if len(values) != len(specs):
            raise TypeError(
                f"{qualname}() takes {len(specs)} positional arguments "
                f"but {len(values)} were given"
            )
        return tuple(self.to_native(v, s) for v, s in zip(values, specs))

    def to_native(self, value: Any, spec: Any) -> Any:
        if spec is None:
            return value
        if isinstance(spec, TypeDescriptor):
            return self._bridge.from_host(value, spec, strict=self._strict_dtype)
        if isinstance(spec, SequenceOf):
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                raise ConversionError(
                    f"expected a sequence, got {type(value).__name__}"
                )
            return [self.to_native(v, spec.element) for v in value]
        if isinstance(spec, tuple):
            if not isinstance(value, tuple) or len(value) != len(spec):
                raise ConversionError(f"expected a tuple of {len(spec)} values")
            return tuple(self.to_native(v, s) for v, s in zip(value, spec))
        if isinstance(spec, type):
            host_cls = self._host_classes[spec]
            if isinstance(value, host_cls):
                return value._native
            if isinstance(value, spec):
                return value
            raise ConversionError(
                f"expected {host_cls.__name__}, got {type(value).__name__}"
            )
        raise InternalError(f"unsupported marshaling spec {spec!r}")

    def to_host(self, value: Any, spec: Any) -> Any:
        if spec is None:
            return value
        if isinstance(spec, TypeDescriptor):
            return self._bridge.to_host(value, spec)
        if isinstance(spec, SequenceOf):
            return [self.to_host(v, spec.element) for v in value]
        if isinstance(spec, tuple):
            if not isinstance(value, tuple) or len(value) != len(spec):
                raise ConversionError(
                    f"native side returned {type(value).__name__}, "
                    f"expected a tuple of {len(spec)} values"
                )
            return tuple(self.to_host(v, s) for v, s in zip(value, spec))
        if isinstance(spec, type):
            if value is None:
                return None
            if not isinstance(value, spec):
                raise ConversionError(
                    f"native side returned {type(value).__name__}, "
                    f"expected {spec.__name__}"
                )
            return self._host_classes[spec]._from_native(value)
        raise InternalError(f"unsupported marshaling spec {spec!r}")


class ClassBuilder:
    """Fluent builder for one exposed class."""

    def __init__(
        self,
        registry: "ExposureRegistry",
        host_class: type[HostObject],
        native_class: type,
    ) -> None:
        self._registry = registry
        self._marshal = registry._marshal
        self.host_class = host_class
        self.native_class = native_class
        self._members: set[str] = {"__init__"}

    @property
    def name(self) -> str:
        return self.host_class.__name__

    def _claim_member(self, name: str) -> str:
        capability = f"{self.name}.{name}"
        if not name.isidentifier() or name in self._members:
            raise RegistrationError(
                f"member {capability} is already defined or not a valid name",
                capability=capability,
                error_code=ErrorCode.FFI_NAME_COLLISION,
            )
        self._members.add(name)
        return capability

    def _native_callable(self, attr: str, capability: str) -> None:
        if not callable(getattr(self.native_class, attr, None)):
            raise RegistrationError(
                f"{self.native_class.__name__} has no callable {attr!r}",
                capability=capability,
            )

    def def_(
        self,
        name: str,
        args: Optional[Sequence[Any]] = None,
        returns: Any = None,
        attr: Optional[str] = None,
        doc: Optional[str] = None,
    ) -> "ClassBuilder":
        """Expose a native instance method."""
        capability = self._claim_member(name)
        attr = attr or name
        self._native_callable(attr, capability)
        specs = None if args is None else tuple(args)
        self._registry._resolve_all(specs, capability)
        self._registry._resolve(returns, capability)
        marshal = self._marshal

        def method(self_: HostObject, *values: Any) -> Any:
            native_args = marshal.arguments(capability, values, specs)
            result = getattr(self_._native, attr)(*native_args)
            return marshal.to_host(result, returns)

        method.__name__ = name
        method.__qualname__ = capability
        method.__doc__ = doc or getattr(self.native_class, attr).__doc__
        setattr(self.host_class, name, method)
        return self

    def def_static(
        self,
        name: str,
        args: Optional[Sequence[Any]] = None,
        returns: Any = None,
        attr: Optional[str] = None,
        doc: Optional[str] = None,
    ) -> "ClassBuilder":
        """Expose a native static method or classmethod."""
        capability = self._claim_member(name)
        attr = attr or name
        self._native_callable(attr, capability)
        specs = None if args is None else tuple(args)
        self._registry._resolve_all(specs, capability)
        self._registry._resolve(returns, capability)
        marshal = self._marshal
        native_class = self.native_class

        def function(*values: Any) -> Any:
            native_args = marshal.arguments(capability, values, specs)
            return marshal.to_host(getattr(native_class, attr)(*native_args), returns)

        function.__name__ = name
        function.__qualname__ = capability
        function.__doc__ = doc or getattr(native_class, attr).__doc__
        setattr(self.host_class, name, staticmethod(function))
        return self

    def add_property(
        self,
        name: str,
        spec: Any = None,
        writable: bool = False,
        attr: Optional[str] = None,
        doc: Optional[str] = None,
    ) -> "ClassBuilder":
        """Expose a native attribute, read-only unless ``writable``."""
        capability = self._claim_member(name)
        attr = attr or name
        self._registry._resolve(spec, capability)
        marshal = self._marshal

        def getter(self_: HostObject) -> Any:
            return marshal.to_host(getattr(self_._native, attr), spec)

        setter = None
        if writable:

            def setter(self_: HostObject, value: Any) -> None:
                setattr(self_._native, attr, marshal.to_native(value, spec))

        setattr(self.host_class, name, property(getter, setter, doc=doc))
        return self


class ExposureRegistry:
    """Stages the host-visible bindings produced by a native library.

    ``strict_dtype`` applies to the host classes generated by this registry
    only; ``None`` follows the bridge's own setting.
    """

    def __init__(
        self,
        bridge: NumericBridge,
        module_name: str,
        strict_dtype: Optional[bool] = None,
    ) -> None:
        self.bridge = bridge
        self.module_name = module_name
        self.strict_dtype = strict_dtype
        self._bindings: dict[str, Any] = {}
        self._host_classes: dict[type, type[HostObject]] = {}
        self._class_refs: list[tuple[type, str]] = []
        self._marshal = _Marshaler(bridge, self._host_classes, strict_dtype)

    # ------------------------------------------------------------------
    # Spec resolution
    # ------------------------------------------------------------------

    def _resolve(self, spec: Any, capability: str) -> None:
        if spec is None:
            return
        if isinstance(spec, TypeDescriptor):
            try:
                self.bridge.adapter_for(spec)
            except ConversionError as exc:
                raise RegistrationError(
                    f"{capability}: {exc.message}",
                    capability=capability,
                    error_code=ErrorCode.FFI_UNSUPPORTED_TYPE,
                    descriptor=str(spec),
                ) from exc
        elif isinstance(spec, SequenceOf):
            self._resolve(spec.element, capability)
        elif isinstance(spec, tuple):
            self._resolve_all(spec, capability)
        elif isinstance(spec, type):
            # Classes may be exposed after the members that reference them.
            self._class_refs.append((spec, capability))
        else:
            raise RegistrationError(
                f"{capability}: unsupported marshaling spec {spec!r}",
                capability=capability,
            )

    def _resolve_all(self, specs: Optional[Sequence[Any]], capability: str) -> None:
        for spec in specs or ():
            self._resolve(spec, capability)

    def _claim(self, name: str) -> None:
        if not name.isidentifier() or name.startswith("__") or name in RESERVED_NAMES:
            raise RegistrationError(
                f"{name!r} is reserved or not a valid module attribute name",
                capability=name,
                error_code=ErrorCode.FFI_NAME_COLLISION,
            )
        if name in self._bindings:
            raise RegistrationError(
                f"{name!r} is already registered",
                capability=name,
                error_code=ErrorCode.FFI_NAME_COLLISION,
            )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def class_(
        self,
        name: str,
        native_class: type,
        init: Any = None,
        doc: Optional[str] = None,
    ) -> ClassBuilder:
        """Expose ``native_class`` under ``name``.

        Args:
            init: Argument specs of the constructor, ``None`` to forward
                constructor arguments unchanged, or ``NO_INIT`` for classes
                that cannot be constructed from the host.
        """
        self._claim(name)
        if native_class in self._host_classes:
            raise RegistrationError(
                f"{native_class.__name__} is already exposed as "
                f"{self._host_classes[native_class].__name__}",
                capability=name,
                error_code=ErrorCode.FFI_NAME_COLLISION,
            )

        namespace: dict[str, Any] = {
            "__slots__": (),
            "__module__": self.module_name,
            "__qualname__": name,
            "__doc__": doc or native_class.__doc__,
            "_native_class": native_class,
        }
        if init is NO_INIT:
            namespace["__init__"] = _no_init(name)
        else:
            specs = None if init is None else tuple(init)
            self._resolve_all(specs, f"{name}.__init__")
            namespace["__init__"] = _make_init(
                name, native_class, specs, self._marshal
            )

        host_class = type(name, (HostObject,), namespace)
        self._host_classes[native_class] = host_class
        self._bindings[name] = host_class
        logger.debug(f"Exposed class {name} ({native_class.__qualname__})")
        return ClassBuilder(self, host_class, native_class)

    def def_(
        self,
        name: str,
        func: Callable[..., Any],
        args: Optional[Sequence[Any]] = None,
        returns: Any = None,
        doc: Optional[str] = None,
    ) -> None:
        """Expose a module-level native function."""
        self._claim(name)
        specs = None if args is None else tuple(args)
        self._resolve_all(specs, name)
        self._resolve(returns, name)
        marshal = self._marshal

        def function(*values: Any) -> Any:
            return marshal.to_host(func(*marshal.arguments(name, values, specs)), returns)

        function.__name__ = name
        function.__qualname__ = name
        function.__module__ = self.module_name
        function.__doc__ = doc or func.__doc__
        self._bindings[name] = function
        logger.debug(f"Exposed function {name}")

    def add_value(self, name: str, value: Any) -> None:
        """Expose a constant."""
        self._claim(name)
        self._bindings[name] = value

    def bindings(self) -> dict[str, Any]:
        """Validated name -> object mapping of everything staged so far."""
        for native_class, capability in self._class_refs:
            if native_class not in self._host_classes:
                raise RegistrationError(
                    f"{capability} references {native_class.__qualname__}, "
                    "which was never exposed",
                    capability=capability,
                    error_code=ErrorCode.FFI_UNSUPPORTED_TYPE,
                )
        return dict(self._bindings)


def _make_init(
    name: str,
    native_class: type,
    specs: Optional[tuple],
    marshal: _Marshaler,
) -> Callable[..., None]:
    def __init__(self: HostObject, *values: Any) -> None:
        self._native = native_class(*marshal.arguments(name, values, specs))

    __init__.__qualname__ = f"{name}.__init__"
    __init__.__doc__ = native_class.__init__.__doc__
    return __init__


def _no_init(name: str) -> Callable[..., None]:
    def __init__(self: HostObject, *values: Any) -> None:
        raise TypeError(f"{name} cannot be instantiated from Python")

    __init__.__qualname__ = f"{name}.__init__"
    return __init__


def register_all(registry: ExposureRegistry, library: "NativeLibrary") -> dict[str, Any]:
    """Run the library's exposure entry point once and return its bindings.

    Any failure, whether reported through the FfiResult or raised, surfaces
    as ``RegistrationError``.
    """
    expose = ffi_call(library.expose_core)
    try:
        expose(registry)
    except RegistrationError:
        raise
    except BridgeError as exc:
        raise RegistrationError(
            f"capability exposure failed: {exc.message}",
            native_error=str(exc),
        ) from exc
    except Exception as exc:
        raise RegistrationError(
            f"capability exposure failed: {exc}",
            native_error=repr(exc),
        ) from exc
    return registry.bindings()


__all__ = [
    "ClassBuilder",
    "ExposureRegistry",
    "HostObject",
    "NO_INIT",
    "RESERVED_NAMES",
    "SequenceOf",
    "register_all",
]
