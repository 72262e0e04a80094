# -*- coding: utf-8 -*-
"""Version single source of truth (read from version.json)."""

from __future__ import annotations

import json
from pathlib import Path

_DEFAULT_VERSION = "0.0.0"


def _read_version_json() -> str:
    version_path = Path(__file__).resolve().parents[1] / "version.json"
    try:
        data = json.loads(version_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return _DEFAULT_VERSION
    return str(data.get("semver") or data.get("version") or _DEFAULT_VERSION)


__version__ = _read_version_json()
