# -*- coding: utf-8 -*-
"""
Logging setup: crashes, tracebacks and HTTP traffic end up in user space.
"""
from __future__ import annotations

import logging
from pathlib import Path

from infra.paths import logs_dir

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _has_file_handler(logger: logging.Logger, log_path: Path) -> bool:
    return any(
        isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == str(log_path)
        for h in logger.handlers
    )


def init_logging(filename: str = "app.log", level: int = logging.INFO) -> Path:
    log_path = logs_dir() / filename
    # Don't add multiple handlers if init called twice
    root = logging.getLogger()
    if not _has_file_handler(root, log_path):
        logging.basicConfig(
            level=level,
            format=_FORMAT,
            handlers=[logging.FileHandler(log_path, encoding="utf-8"), logging.StreamHandler()],
        )
    return log_path


def _attach_file_logger(logger_name: str, filename: str, level: int) -> Path:
    log_path = logs_dir() / filename
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    if not _has_file_handler(logger, log_path):
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(fh)
    return log_path


def init_http_logging(filename: str = "http.log") -> Path:
    """Dedicated file for resource client traffic (requests, status codes, failures).

    Keeps API troubleshooting separate from the main app log.
    """
    return _attach_file_logger("services.resource_client", filename, logging.DEBUG)


def init_perf_logging(filename: str = "perf.log") -> Path:
    """Dedicated file for performance timings.

    Timings are emitted by infra.perf.span when SHOPDESK_PERF=1.
    """
    return _attach_file_logger("shopdesk.perf", filename, logging.INFO)
