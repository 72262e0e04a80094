# -*- coding: utf-8 -*-
"""Common dialogs helpers.

Thin wrappers around QMessageBox to keep UI consistent and reduce duplication.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from PyQt5.QtWidgets import QMessageBox, QWidget


def info(parent: Optional[QWidget], title: str, text: str) -> None:
    QMessageBox.information(parent, title, text)


def warn(parent: Optional[QWidget], title: str, text: str) -> None:
    QMessageBox.warning(parent, title, text)


def error(parent: Optional[QWidget], title: str, text: str, details: Optional[str] = None) -> None:
    box = QMessageBox(QMessageBox.Critical, title, text, QMessageBox.Ok, parent)
    if details:
        box.setDetailedText(details)
    box.exec_()


def confirm(parent: Optional[QWidget], title: str, text: str, *, default_no: bool = True) -> bool:
    """Yes/No question. Returns True if user chooses Yes."""
    default = QMessageBox.No if default_no else QMessageBox.Yes
    r = QMessageBox.question(parent, title, text, QMessageBox.Yes | QMessageBox.No, default)
    return r == QMessageBox.Yes


class SaveChoice(str, Enum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


_BUTTONS = {
    SaveChoice.SAVE: QMessageBox.Save,
    SaveChoice.DISCARD: QMessageBox.Discard,
    SaveChoice.CANCEL: QMessageBox.Cancel,
}


def ask_save_discard_cancel(
    parent: Optional[QWidget],
    title: str,
    text: str,
    *,
    default: SaveChoice = SaveChoice.SAVE,
    allowed: Iterable[SaveChoice] = (SaveChoice.SAVE, SaveChoice.DISCARD, SaveChoice.CANCEL),
) -> SaveChoice:
    """Unsaved-changes question. *allowed* limits the buttons shown."""
    allowed = [SaveChoice(c) for c in allowed] or [SaveChoice.CANCEL]
    buttons = QMessageBox.NoButton
    for choice in allowed:
        buttons |= _BUTTONS[choice]
    if default not in allowed:
        default = SaveChoice.CANCEL if SaveChoice.CANCEL in allowed else allowed[0]

    r = QMessageBox.question(parent, title, text, buttons, _BUTTONS[default])

    if r == QMessageBox.Save:
        return SaveChoice.SAVE
    if r == QMessageBox.Discard:
        return SaveChoice.DISCARD
    return SaveChoice.CANCEL
