# -*- coding: utf-8 -*-
"""screens/base.py

Base class for UI screens.

Screens hold a controller/session object (never editing state of their own)
and may override:
- refresh(): re-read the controller state into widgets
- can_deactivate(): veto leaving the screen (unsaved changes)
- can_close(): veto closing the window (defaults to can_deactivate)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from PyQt5.QtWidgets import QWidget

log = logging.getLogger(__name__)


class ScreenBase(QWidget):
    title = ""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._refreshing = False

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    @contextmanager
    def ui_refresh_scope(self):
        """While active, widget change signals must not reach the controller."""
        prev = self._refreshing
        self._refreshing = True
        try:
            yield
        finally:
            self._refreshing = prev

    def refresh(self) -> None:
        pass

    def on_view_activated(self, reason: str = "") -> None:
        log.debug("%s activated (%s)", type(self).__name__, reason)
        self.refresh()

    def can_deactivate(self, parent=None) -> bool:
        return True

    def can_close(self, parent=None) -> bool:
        return self.can_deactivate(parent)
