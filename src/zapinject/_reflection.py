from __future__ import annotations

import functools
import inspect
import logging
import pkgutil
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._errors import describe


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)

EMPTY: Any = inspect.Parameter.empty

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Slot:
    """One declared parameter of an invokable, as seen by the injector."""

    name: str
    kind: inspect._ParameterKind
    annotation: Any = EMPTY  # EMPTY when untyped
    default: Any = EMPTY

    @property
    def typed(self) -> bool:
        return self.annotation is not EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY

    @property
    def variadic(self) -> bool:
        return self.kind in _VARIADIC


def reflect(target: Callable[..., Any]) -> list[Slot]:
    """Ordered parameters of a class constructor, routine, or callable object.

    - classes: the constructor signature, `self` excluded
    - functions, bound methods, builtins and partials: their own signature
    - other objects: the signature of their bound `__call__`

    Raises `TypeError` for non-callables and lets `ValueError` through for
    builtins that expose no signature.
    """
    if inspect.isclass(target) or inspect.isroutine(target) or isinstance(target, functools.partial):
        sig = _signature(target)
    elif callable(target):
        sig = _signature(target.__call__)
    else:
        msg = f"{describe(target)} is not callable"
        raise TypeError(msg)

    return [
        Slot(name=p.name, kind=p.kind, annotation=p.annotation, default=p.default) for p in sig.parameters.values()
    ]


def _signature(target: Callable[..., Any]) -> inspect.Signature:
    try:
        return inspect.signature(target, eval_str=True)
    except NameError as exc:
        logger.warning(
            "'%s' name error evaluating %s annotations, keeping unresolvable ones as strings",
            exc.name,
            describe(target),
        )

    # Evaluate each annotation on its own: only the unresolvable ones stay strings
    # and are looked up as string keys.
    sig = _raw_signature(target)
    namespace = _globals_of(target)
    params = [p.replace(annotation=_evaluate(p.annotation, namespace)) for p in sig.parameters.values()]
    return sig.replace(parameters=params)


def _evaluate(annotation: Any, namespace: dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, namespace)  # noqa: S307
    except NameError:
        return annotation


def _globals_of(target: Any) -> dict[str, Any]:
    while isinstance(target, functools.partial):
        target = target.func

    if inspect.isclass(target):
        module = sys.modules.get(target.__module__)
        return vars(module) if module is not None else {}

    if not inspect.isroutine(target):
        target = getattr(target, "__call__", target)  # noqa: B004
    target = getattr(target, "__func__", target)
    return getattr(inspect.unwrap(target), "__globals__", {})


if sys.version_info >= (3, 14):
    import annotationlib

    def _raw_signature(target: Callable[..., Any]) -> inspect.Signature:
        return inspect.signature(target, annotation_format=annotationlib.Format.STRING)

else:

    def _raw_signature(target: Callable[..., Any]) -> inspect.Signature:
        return inspect.signature(target)


def load(path: str) -> Any:
    """Import the object named by `path` (``"pkg.module:attr"`` or ``"pkg.module.attr"``)."""
    return pkgutil.resolve_name(path)
