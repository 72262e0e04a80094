# -*- coding: utf-8 -*-
"""Left navigation bar of the main window.

Buttons emit the page index they stand for; the window decides whether the
move is allowed (unsaved changes) and calls ``set_active`` once it happened.
"""
from __future__ import annotations

from typing import Dict, Iterable, Tuple

from PyQt5.QtCore import pyqtSignal
from PyQt5.QtWidgets import QFrame, QToolButton, QVBoxLayout

_MARK = " •"


class Sidebar(QFrame):
    navigate_requested = pyqtSignal(int)

    def __init__(self, items: Iterable[Tuple[int, str]], parent=None):
        super().__init__(parent)
        self.setObjectName("Sidebar")
        self._active_index = -1
        self._buttons: Dict[int, QToolButton] = {}
        self._labels: Dict[int, str] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        for idx, label in items:
            btn = QToolButton(self)
            btn.setObjectName("SidebarItem")
            btn.setText(label)
            btn.clicked.connect(lambda _=False, i=idx: self.navigate_requested.emit(i))
            layout.addWidget(btn)
            self._buttons[idx] = btn
            self._labels[idx] = label

        layout.addStretch(1)
        self.setFixedWidth(180)

    def set_active(self, index: int) -> None:
        self._active_index = int(index)
        for idx, btn in self._buttons.items():
            btn.setProperty("active", idx == self._active_index)
            # Re-polish so the "active" property selector applies.
            btn.style().unpolish(btn)
            btn.style().polish(btn)

    def set_marked(self, index: int, marked: bool) -> None:
        """Flag a page (unsaved changes) with a bullet after its label."""
        btn = self._buttons.get(index)
        if btn is None:
            return
        label = self._labels[index]
        btn.setText(label + _MARK if marked else label)
        btn.setToolTip("Unsaved changes" if marked else "")
