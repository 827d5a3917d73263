from __future__ import annotations

import functools
import inspect
import logging
import threading
import typing
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import (
    CyclicDependencyError,
    InvalidRegistrationError,
    UnresolvedDependencyError,
    UntypedParameterError,
    describe,
)
from ._reflection import Slot, load, reflect


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    T = TypeVar("T")

_UNSET: Any = object()


@dataclass(frozen=True)
class Factory:
    """Builds the instance on first request; `provider` is itself dependency-injected."""

    provider: Callable[..., object]


@dataclass(frozen=True)
class Instance:
    """A pre-built value, returned as-is on every request."""

    value: object


def _is_key(value: object) -> bool:
    """Classes, strings and parameterized typing aliases identify registrations."""
    return isinstance(value, (str, type)) or typing.get_origin(value) is not None


def _key_of(value: object) -> Any:
    return value if _is_key(value) else type(value)


def _is_factory(value: object) -> bool:
    return inspect.isroutine(value) or isinstance(value, functools.partial)


class Injector:
    """Resolves and injects dependencies by the declared parameter types of callables.

    Every registration is a singleton: a `Factory` runs at most once per key and
    its result is cached until the key is unregistered or registered again.

    `has(key)` is true exactly when a `Factory` or `Instance` is registered for
    `key`. It does not change while the key is being resolved.
    """

    def __init__(self, *, register_self: bool = True) -> None:
        self._strategies: dict[Any, Factory | Instance] = {}
        self._instances: dict[Any, object] = {}
        self._extensions: dict[Any, deque[Callable[..., object]]] = {}
        self._resolving: list[Any] = []
        self._lock = threading.RLock()

        if register_self:
            self.register(self)
            if type(self) is not Injector:
                self.register(Injector, self)

    def register(self, key: Any, implementation: Any = _UNSET) -> Injector:
        """Register how to obtain `key`.

        Example:
          injector.register(Clock, make_clock)        # factory, injected on first get
          injector.register(Logger, logger)           # pre-built instance
          injector.register(Storage, DiskStorage)     # bind to create(DiskStorage)
          injector.register("Mailer", "app.mail:Smtp")  # bind to a dotted path
          injector.register(Service)                  # create(Service)
          injector.register(settings)                 # instance under type(settings)

        Registering a key again replaces its strategy and drops the cached instance.
        """
        if key is None or (not _is_key(key) and implementation is not _UNSET):
            msg = f"Invalid dependency registration for {describe(key)}"
            raise InvalidRegistrationError(msg)

        strategy: Factory | Instance
        if not _is_key(key):
            key, strategy = type(key), Instance(key)
        elif implementation is _UNSET:
            strategy = Factory(self._creator(key))
        elif _is_factory(implementation):
            strategy = Factory(implementation)
        elif _is_key(implementation):
            strategy = Factory(self._creator(implementation))
        else:
            strategy = Instance(implementation)

        with self._lock:
            self._strategies[key] = strategy
            self._instances.pop(key, None)
            if isinstance(strategy, Instance):
                self._instances[key] = strategy.value

        logger.debug("Registered %s as %s", describe(key), type(strategy).__name__)
        return self

    def unregister(self, key: Any) -> None:
        """Forget the strategy and cached instance of `key`. Pending extensions are kept."""
        key = _key_of(key)
        with self._lock:
            self._strategies.pop(key, None)
            self._instances.pop(key, None)
        logger.debug("Unregistered %s", describe(key))

    def has(self, key: Any) -> bool:
        """Whether a strategy is registered for `key` (or for the type of an instance)."""
        return self._registered(_key_of(key))

    def extend(self, key: Any, callback: Callable[..., object]) -> None:
        """Queue `callback` to be invoked once, the next time `key` is resolved.

        The callback is dependency-injected like any other invokable, so it may
        declare a parameter of type `key` to receive the instance. An instance
        passed as `key` stands for its type, as in `has`.
        """
        if not callable(callback):
            msg = f"Extension for {describe(key)} must be callable, got {describe(callback)}"
            raise TypeError(msg)

        key = _key_of(key)
        with self._lock:
            self._extensions.setdefault(key, deque()).append(callback)

    @overload
    def get(self, key: type[T]) -> T: ...

    @overload
    def get(self, key: Any) -> Any: ...

    def get(self, key: Any) -> Any:
        """Return the instance registered for `key`, creating it on first request.

        Pending extensions for `key` run after the instance is cached, on every call.
        """
        with self._lock:
            if not self._registered(key):
                raise UnresolvedDependencyError(key)

            if key in self._resolving:
                raise CyclicDependencyError(key, self._resolving)

            if key not in self._instances:
                self._instances[key] = self._build(key, self._strategies[key])

            self._run_extensions(key)
            return self._instances[key]

    def invoke(self, target: Callable[..., T] | str) -> T:
        """Call `target` with its parameters resolved from the registry.

        `target` may be any callable, or a dotted path such as ``"pkg.module:function"``.
        """
        if isinstance(target, str):
            target = self._load(target)

        with self._lock:
            args, kwargs = self._arguments(target, reflect(target))
            return target(*args, **kwargs)

    @overload
    def create(self, cls: type[T]) -> T: ...

    @overload
    def create(self, cls: str) -> Any: ...

    def create(self, cls: type[T] | str) -> Any:
        """Construct `cls` directly, resolving its constructor parameters.

        The registry is only used for the parameters, never for `cls` itself.
        """
        if isinstance(cls, str):
            cls = self._load(cls)

        if not inspect.isclass(cls):
            msg = f"Cannot create {describe(cls)}: not a class"
            raise TypeError(msg)

        with self._lock:
            if cls.__init__ is object.__init__:  # type: ignore[misc]
                return cls()

            try:
                slots = reflect(cls)
            except ValueError:
                logger.debug("No signature available for %s, creating without arguments", describe(cls))
                return cls()

            args, kwargs = self._arguments(cls, slots)
            return cls(*args, **kwargs)

    def _registered(self, key: Any) -> bool:
        try:
            return key in self._strategies
        except TypeError:
            # unhashable annotations, e.g. Annotated metadata holding a dict, are never registered
            return False

    def _creator(self, cls: Any) -> Callable[[], object]:
        def factory() -> object:
            return self.create(cls)

        return factory

    def _build(self, key: Any, strategy: Factory | Instance) -> object:
        if isinstance(strategy, Instance):
            return strategy.value

        self._resolving.append(key)
        try:
            logger.debug("Creating %s", describe(key))
            return self.invoke(strategy.provider)
        finally:
            self._resolving.pop()

    def _run_extensions(self, key: Any) -> None:
        pending = self._extensions.get(key)
        while pending:
            extension = pending.popleft()
            logger.debug("Extending %s with %s", describe(key), describe(extension))
            self.invoke(extension)

    def _load(self, path: str) -> Any:
        try:
            return load(path)
        except (ImportError, AttributeError, ValueError) as exc:
            raise UnresolvedDependencyError(path) from exc

    def _arguments(self, target: Any, slots: list[Slot]) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for slot in slots:
            # *args/**kwargs are never injected
            if slot.variadic:
                continue

            value = self._resolve_slot(target, slot)
            if slot.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[slot.name] = value

        return args, kwargs

    def _resolve_slot(self, target: Any, slot: Slot) -> Any:
        """Resolving a parameter.

        Resolution order:
        1. untyped: default, else error
        2. type mid-construction: cyclic dependency error
        3. type not registered: default, else error
        4. registered type.
        """
        if not slot.typed:
            if slot.has_default:
                return slot.default
            raise UntypedParameterError(slot.name, target)

        key = slot.annotation
        if key in self._resolving:
            raise CyclicDependencyError(key, self._resolving)

        if not self._registered(key):
            if slot.has_default:
                return slot.default
            raise UnresolvedDependencyError(key, slot.name)

        return self.get(key)
