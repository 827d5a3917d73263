from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Sequence


def describe(key: Any) -> str:
    """Readable name for a key: classes and routines by qualified name, everything else by repr."""
    if isinstance(key, type) or inspect.isroutine(key):
        return key.__qualname__
    return repr(key)


class InjectorError(Exception):
    """Base class for every failure raised by the injector."""


class InvalidRegistrationError(InjectorError, TypeError):
    """`register` was called with a combination of arguments it does not understand."""


class ResolutionError(InjectorError, RuntimeError):
    pass


class UnresolvedDependencyError(ResolutionError, LookupError):
    """A key has no registered strategy and no default value to fall back on."""

    def __init__(self, key: Any, parameter: str | None = None) -> None:
        self.key = key
        self.parameter = parameter
        if parameter is None:
            msg = f"{describe(key)} has not been registered"
        else:
            msg = f"Cannot satisfy parameter '{parameter}': {describe(key)} has not been registered"
        super().__init__(msg)


class UntypedParameterError(ResolutionError):
    def __init__(self, parameter: str, target: Any) -> None:
        self.parameter = parameter
        self.target = target
        msg = f"Parameter '{parameter}' of {describe(target)} has no annotation and no default value"
        super().__init__(msg)


class CyclicDependencyError(ResolutionError):
    """A key's construction requires itself, directly or through other keys.

    `chain` is the resolution stack at the point of detection, outermost first,
    with `key` appended to close the loop.
    """

    def __init__(self, key: Any, chain: Sequence[Any]) -> None:
        self.key = key
        self.chain = (*chain, key)
        path = " -> ".join(describe(k) for k in self.chain)
        super().__init__(f"Recursive dependency: {describe(key)} is currently instantiating ({path})")
