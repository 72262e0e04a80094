# -*- coding: utf-8 -*-
"""
Application bootstrap (runs before UI):
- Init logging (app, HTTP, perf)
- Install crash handlers
- Load per-user settings
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from infra.crash_handler import install_global_exception_handlers
from infra.logging_setup import init_http_logging, init_logging, init_perf_logging
from infra.perf import is_enabled as perf_enabled
from infra.settings import load_settings

log = logging.getLogger(__name__)


def bootstrap() -> Dict[str, Any]:
    log_path = init_logging()
    init_http_logging()
    if perf_enabled():
        init_perf_logging()
    install_global_exception_handlers()
    settings = load_settings()
    log.info("shopdesk starting (log: %s, backend: %s)", log_path, settings.get("api_base_url"))
    return settings
