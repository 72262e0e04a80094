# -*- coding: utf-8 -*-
"""
User settings stored in a per-user writable folder (no admin).

Holds connection settings (backend URL, token, active shop) and a few UI
preferences. Window/tab state lives in QSettings (ui/common/state.py).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from app import config
from infra.paths import user_data_dir

SETTINGS_FILENAME = "shopdesk_settings.json"
log = logging.getLogger(__name__)


def settings_file() -> Path:
    return user_data_dir() / SETTINGS_FILENAME


def _defaults() -> Dict[str, Any]:
    return {
        "api_base_url": config.API_BASE_URL,
        "api_token": None,
        "shop_id": None,
        "shop_slug": None,
        "page_size": config.DEFAULT_PAGE_SIZE,
        "last_product_id": None,
    }


def load_settings() -> Dict[str, Any]:
    defaults = _defaults()
    path = settings_file()
    if not path.exists():
        save_settings(defaults.copy())
        return defaults.copy()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        # Recover from corruption gracefully
        log.warning("settings file %s is unreadable; resetting to defaults", path, exc_info=True)
        save_settings(defaults.copy())
        return defaults.copy()
    merged = defaults.copy()
    if isinstance(data, dict):
        merged.update({k: v for k, v in data.items() if v is not None})
    return merged


def save_settings(data: Dict[str, Any]) -> None:
    path = settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def update_settings(**changes: Any) -> Dict[str, Any]:
    s = load_settings()
    s.update(changes)
    save_settings(s)
    return s


def repair_user_space() -> Dict[str, Any]:
    """Reset per-user settings to defaults.

    Safe to run without admin rights; meant for a 'Repair installation'
    shortcut.
    """
    path = settings_file()
    if path.exists():
        try:
            path.unlink()
        except OSError:
            log.warning("could not remove %s", path, exc_info=True)
    return load_settings()
