# -*- coding: utf-8 -*-
"""
domain/parse.py

Single place for parsing/normalizing raw form input.
Goal:
- Form widgets hand us strings; the backend hands us numbers/None.
  Both must land on the same canonical value so that an untouched field
  never looks edited.
- Tolerate decimal comma ("12,5") and thousands separators ("1.234,56").
"""

from __future__ import annotations

from typing import Any, Optional


def is_blank(val: Any) -> bool:
    """True if the value must be treated as 'empty'."""
    if val is None:
        return True

    # bool is a subclass of int; it is never blank.
    if isinstance(val, (int, float)):
        return False

    s = str(val).strip()
    if s == "":
        return True

    return False


def to_float(val: Any, default: Optional[float] = None) -> Optional[float]:
    """
    Tolerant float conversion.
    - Accepts decimal comma.
    - Handles thousands like "1.234,56" or "1,234.56".
    - Blank -> default.
    """
    if is_blank(val):
        return default

    if isinstance(val, bool):
        # Avoid True/False silently becoming 1.0/0.0.
        return default

    if isinstance(val, (int, float)):
        return float(val)

    s = str(val).strip().replace(" ", "")

    if "," in s and "." in s:
        # The decimal separator is usually the last one to appear.
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    else:
        s = s.replace(",", ".")

    try:
        return float(s)
    except ValueError:
        return default


def to_int(val: Any, default: Optional[int] = None) -> Optional[int]:
    """
    - None / "" -> default
    - "3" -> 3
    - "3,0" -> 3
    - "abc" -> default
    """
    f = to_float(val, default=None)
    if f is None:
        return default
    if f != int(f):
        return default
    return int(f)


def to_bool(val: Any, default: bool = False) -> bool:
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    if isinstance(val, (int, float)):
        return bool(val)
    s = str(val).strip().lower()
    if s in ("1", "true", "yes", "on", "y"):
        return True
    if s in ("0", "false", "no", "off", "n", ""):
        return False
    return default


def to_text(val: Any) -> Optional[str]:
    """Text fields: None and "" collapse to None, everything else is kept verbatim."""
    if val is None:
        return None
    s = str(val)
    return s if s != "" else None
