# -*- coding: utf-8 -*-
"""Global crash/exception handlers.

Unexpected exceptions (main thread and worker threads) go to the log file
in user space instead of exiting silently. Safe to import before
QApplication is created.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from types import TracebackType
from typing import Optional, Type

log = logging.getLogger(__name__)

_handling_exception = False


def _log_exception(exc_type: Type[BaseException], exc: BaseException, tb: Optional[TracebackType]) -> None:
    global _handling_exception
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    if _handling_exception:
        # re-entrant failure while logging
        sys.__stderr__.write("Unhandled exception while handling another one\n")
        return

    _handling_exception = True
    try:
        log.critical("Unhandled exception", exc_info=(exc_type, exc, tb))
    except Exception:
        # last resort
        sys.__stderr__.write("".join(traceback.format_exception(exc_type, exc, tb)))
    finally:
        _handling_exception = False


def install_global_exception_handlers() -> None:
    """Route sys/thread exception hooks to the log."""
    logging.raiseExceptions = False
    sys.excepthook = _log_exception  # type: ignore[assignment]

    def _thread_hook(args):  # pragma: no cover
        _log_exception(args.exc_type, args.exc_value, args.exc_traceback)

    threading.excepthook = _thread_hook  # type: ignore[assignment]
