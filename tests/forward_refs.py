from __future__ import annotations

from services import Logger


# `Clock` and `Missing` are never defined here, so their annotations stay strings.
def report(clock: Clock, label: str = "daily") -> tuple[object, str]:  # noqa: F821
    return clock, label


def needs_missing(thing: Missing) -> object:  # noqa: F821
    return thing


def log_with_extra(logger: Logger, extra: Missing = None) -> tuple[Logger, object]:  # noqa: F821
    return logger, extra
