# -*- coding: utf-8 -*-
"""Runtime dependency checks for shopdesk.

Run before anything imports PyQt5 or requests, so a broken environment
ends in a readable message instead of an ImportError traceback.
"""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version
from typing import List, Tuple

# (distribution name, import name, minimum version)
REQUIRED: Tuple[Tuple[str, str, Tuple[int, ...]], ...] = (
    ("PyQt5", "PyQt5", (5, 15)),
    ("requests", "requests", (2, 28)),
)


def _version_tuple(text: str) -> Tuple[int, ...]:
    parts = []
    for chunk in text.split("."):
        digits = "".join(ch for ch in chunk if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


def runtime_problems() -> List[str]:
    """One line per missing or too-old runtime package."""
    problems: List[str] = []
    for dist, import_name, minimum in REQUIRED:
        try:
            import_module(import_name)
        except ModuleNotFoundError:
            problems.append(f"{dist} is not installed")
            continue
        try:
            installed = version(dist)
        except PackageNotFoundError:
            # Importable but not pip-managed (system packages); trust it.
            continue
        if _version_tuple(installed) < minimum:
            wanted = ".".join(str(p) for p in minimum)
            problems.append(f"{dist} {installed} is too old (need >= {wanted})")
    return problems


def ensure_runtime_deps() -> None:
    """Raise RuntimeError with install guidance if the environment is not usable."""
    problems = runtime_problems()
    if not problems:
        return
    lines = "\n".join(f"  - {p}" for p in problems)
    raise RuntimeError(
        "shopdesk cannot start:\n"
        f"{lines}\n\n"
        "Install or upgrade them with:\n"
        "  pip install -e ."
    )
