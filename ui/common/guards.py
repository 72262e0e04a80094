# -*- coding: utf-8 -*-
"""ui/common/guards.py

Guarded slot helpers: a failing click handler is logged and reported in a
dialog instead of taking the event loop down.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional

from ui.common.error_handler import run_guarded

log = logging.getLogger(__name__)


def connect_if_callable(signal: Any, handler: Any, *, name: str = "handler") -> bool:
    """Connect *signal* to *handler* only if it's callable."""
    if not callable(handler):
        log.debug("Not connecting: %s is not callable (%r)", name, handler)
        return False
    signal.connect(handler)
    return True


def guarded(fn: Callable[..., Any], *, parent=None, title: Optional[str] = None) -> Callable[..., Optional[Any]]:
    """Wrap *fn* for use as a Qt slot (extra signal arguments are passed through)."""

    @functools.wraps(fn)
    def _slot(*args: Any, **kwargs: Any) -> Optional[Any]:
        return run_guarded(lambda: fn(*args, **kwargs), parent=parent, title=title)

    return _slot
