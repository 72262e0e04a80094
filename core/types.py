# -*- coding: utf-8 -*-
"""Shared domain types (pure, test-friendly)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    SUCCESS = "success"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: NotificationVariant = NotificationVariant.DEFAULT


@dataclass(frozen=True)
class SaveKey:
    """Identifies one independently-saveable unit.

    ``item_id`` is only set for per-item sections (one variant at a time).
    """

    section: Any
    item_id: Optional[Any] = None

    def label(self) -> str:
        sec = getattr(self.section, "value", self.section)
        if self.item_id is None:
            return str(sec)
        return f"{sec}[{self.item_id}]"
