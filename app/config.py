# -*- coding: utf-8 -*-
"""Build-time / deployment configuration.

This module is intentionally tiny and *import-safe*.

Resolution order for every value (last wins):
1. the defaults below
2. an optional packaged ``build_config.json`` resource
3. environment variables (``SHOPDESK_API_URL``, ``SHOPDESK_TIMEOUT``)
"""

from __future__ import annotations

import json
import logging
import os

log = logging.getLogger(__name__)

# Backend REST API root (without trailing slash).
API_BASE_URL: str = "http://localhost:8080/api/v1"

# Seconds before a request counts as a transient failure.
REQUEST_TIMEOUT_S: float = 30.0

# Listing page sizes.
DEFAULT_PAGE_SIZE: int = 10
VARIANTS_PAGE_SIZE: int = 100


# --- Build overrides (optional) ---
# When packaging, the build pipeline may include a `build_config.json` resource
# pointing the client at another backend without editing code.
try:
    from infra.paths import resource_path
    _bc_path = resource_path("build_config.json")
    if _bc_path and os.path.exists(_bc_path):
        with open(_bc_path, "r", encoding="utf-8") as _f:
            _bc = json.load(_f) or {}
        API_BASE_URL = str(_bc.get("API_BASE_URL", API_BASE_URL))
        REQUEST_TIMEOUT_S = float(_bc.get("REQUEST_TIMEOUT_S", REQUEST_TIMEOUT_S))
        DEFAULT_PAGE_SIZE = int(_bc.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE))
        VARIANTS_PAGE_SIZE = int(_bc.get("VARIANTS_PAGE_SIZE", VARIANTS_PAGE_SIZE))
except Exception:
    # Never crash on config overrides.
    log.debug("build_config.json ignored", exc_info=True)


# --- Environment overrides ---
API_BASE_URL = os.environ.get("SHOPDESK_API_URL", API_BASE_URL).rstrip("/")
try:
    REQUEST_TIMEOUT_S = float(os.environ.get("SHOPDESK_TIMEOUT", REQUEST_TIMEOUT_S))
except ValueError:
    log.warning("SHOPDESK_TIMEOUT is not a number; using %s", REQUEST_TIMEOUT_S)
