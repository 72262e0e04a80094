# -*- coding: utf-8 -*-
"""Last line of defence for UI callbacks.

Failures the backend reported (``ApiError``) are expected: they are logged
as warnings and shown with their own title and message. Anything else is a
bug; its traceback goes to the log and into the dialog's details pane.
"""

from __future__ import annotations

import logging
import traceback
from typing import Callable, Optional, Tuple, TypeVar

from PyQt5.QtWidgets import QWidget

from services.errors import ApiError, describe
from ui.common import dialogs

log = logging.getLogger(__name__)

T = TypeVar("T")


def error_summary(exc: BaseException, title: Optional[str] = None) -> Tuple[str, str]:
    """Dialog title and text for *exc*."""
    if isinstance(exc, ApiError):
        return title or exc.title, describe(exc)
    if isinstance(exc, ValueError):
        return title or "Cannot continue", str(exc)
    return title or "Unexpected error", f"{exc.__class__.__name__}: {exc}\n\nDetails were written to the log."


def run_guarded(fn: Callable[[], T], *, parent: Optional[QWidget] = None, title: Optional[str] = None) -> Optional[T]:
    """Run *fn*; report a failure in a dialog and return None instead of raising."""
    try:
        return fn()
    except ApiError as e:
        log.warning("request failed in UI callback: %s", e)
        dialogs.error(parent, *error_summary(e, title))
    except Exception as e:
        log.exception("unhandled UI exception")
        dialogs.error(parent, *error_summary(e, title), details=traceback.format_exc())
    return None
