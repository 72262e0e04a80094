# -*- coding: utf-8 -*-
"""Lightweight timing spans for network-bound operations.

Enable by setting env var:
    SHOPDESK_PERF=1

When enabled, timings of saves, uploads and loads slower than their
threshold are written to logger ``shopdesk.perf``. Disabled, ``span`` is a
no-op. Works in source runs and packaged builds.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager

_perf_env = os.environ.get("SHOPDESK_PERF", "").strip().lower()
ENABLED = _perf_env in ("1", "true", "yes", "on")

log = logging.getLogger("shopdesk.perf")


def is_enabled() -> bool:
    return ENABLED


@contextmanager
def span(label: str, *, threshold_ms: float = 50.0):
    """Measure a block and log it when it took at least *threshold_ms*."""
    if not ENABLED:
        yield
        return
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt_ms = (time.perf_counter() - t0) * 1000.0
        if dt_ms >= float(threshold_ms or 0.0):
            log.info("PERF %s %.1fms", label, dt_ms)
