# -*- coding: utf-8 -*-
"""Qt event safety helpers.

In some environments, an uncaught exception inside a Qt slot or event handler
can terminate the app. These wrappers log the traceback and keep it alive.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, TypeVar, Any

T = TypeVar("T")

logger = logging.getLogger(__name__)


def safe_event(fn: Callable[..., T]) -> Callable[..., T | None]:
    """Decorator for Qt event handlers taking ``(self, event)``."""

    @functools.wraps(fn)
    def wrapper(self: Any, e: Any) -> T | None:
        try:
            return fn(self, e)
        except Exception:
            logger.exception("Unhandled error in %s", fn.__qualname__)
            try:
                e.ignore()
            except Exception:
                pass
            return None

    return wrapper


def safe_slot(fn: Callable[..., T]) -> Callable[..., T | None]:
    """Decorator for argument-less slots such as timer callbacks."""

    @functools.wraps(fn)
    def wrapper(self: Any, *_args: Any) -> T | None:
        try:
            return fn(self)
        except Exception:
            logger.exception("Unhandled error in %s", fn.__qualname__)
            return None

    return wrapper
