"""Minimal dependency injector.

This package provides a small runtime dependency injector for Python. It
resolves the dependencies of callables and constructors from their declared
parameter types, using a registry of factories and pre-built instances.

Exports:
- `Injector`: registry plus resolver. Supports register/unregister/has/get/
  extend/invoke/create. Every registration is a lazily-built singleton.
- `Factory`, `Instance`: the two construction strategies a key can hold.
- `InjectorError` and its subclasses: the failures raised by registration
  and resolution.
"""

from ._errors import (
    CyclicDependencyError,
    InjectorError,
    InvalidRegistrationError,
    ResolutionError,
    UnresolvedDependencyError,
    UntypedParameterError,
)
from ._injector import Factory, Injector, Instance


__all__ = [
    "CyclicDependencyError",
    "Factory",
    "Injector",
    "InjectorError",
    "Instance",
    "InvalidRegistrationError",
    "ResolutionError",
    "UnresolvedDependencyError",
    "UntypedParameterError",
]
