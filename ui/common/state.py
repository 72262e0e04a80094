# -*- coding: utf-8 -*-
"""ui/common/state.py

Per-user UI state persistence helpers (QSettings).
- last active section per product editor
- QHeaderView (table header) state
- main window geometry

Best-effort: failures should never crash the app.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import QSettings
from PyQt5.QtWidgets import QHeaderView, QWidget

log = logging.getLogger(__name__)

ORG_NAME = "shopdesk"
APP_NAME = "shopdesk"


def _settings() -> QSettings:
    return QSettings(ORG_NAME, APP_NAME)


def get_last_section(record_id: str) -> Optional[str]:
    try:
        val = _settings().value(f"editor/{record_id}/section")
        return str(val) if val else None
    except Exception:
        log.debug("get_last_section failed (%s)", record_id, exc_info=True)
        return None


def set_last_section(record_id: str, section: str) -> None:
    try:
        _settings().setValue(f"editor/{record_id}/section", str(section))
    except Exception:
        log.debug("set_last_section failed (%s)", record_id, exc_info=True)


def save_header_state(header: QHeaderView, key: str) -> None:
    try:
        _settings().setValue(key, header.saveState())
    except Exception:
        log.debug("save_header_state failed (%s)", key, exc_info=True)


def restore_header_state(header: QHeaderView, key: str) -> None:
    try:
        data = _settings().value(key)
        if data is not None:
            header.restoreState(data)
    except Exception:
        log.debug("restore_header_state failed (%s)", key, exc_info=True)


def save_geometry(widget: QWidget, key: str = "ui/main_window_geometry") -> None:
    try:
        _settings().setValue(key, widget.saveGeometry())
    except Exception:
        log.debug("save_geometry failed (%s)", key, exc_info=True)


def restore_geometry(widget: QWidget, key: str = "ui/main_window_geometry") -> None:
    try:
        data = _settings().value(key)
        if data is not None:
            widget.restoreGeometry(data)
    except Exception:
        log.debug("restore_geometry failed (%s)", key, exc_info=True)
