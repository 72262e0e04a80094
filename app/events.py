# -*- coding: utf-8 -*-
"""Simple event bus for editor-level notifications (no UI dependency)."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Type


@dataclass(frozen=True)
class RecordLoaded:
    record_id: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DirtyChanged:
    dirty: bool
    sections: tuple = ()


@dataclass(frozen=True)
class SectionSaveStarted:
    key: Any


@dataclass(frozen=True)
class SectionSaved:
    key: Any
    nothing_to_save: bool = False
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SectionSaveFailed:
    key: Any
    error: BaseException


@dataclass(frozen=True)
class NavigationIntercepted:
    intent: Any


@dataclass(frozen=True)
class NavigationResolved:
    intent: Any
    choice: Optional[str] = None


@dataclass(frozen=True)
class SectionActivated:
    section: Any
    location: str = ""


class EventBus:
    """Minimal in-process event bus (best-effort)."""

    def __init__(self) -> None:
        self._subs: Dict[Type[Any], List[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        self._subs.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[Any], callback: Callable[[Any], None]) -> None:
        subs = self._subs.get(event_type) or []
        if callback in subs:
            subs.remove(callback)

    def emit(self, event: Any) -> None:
        for cb in list(self._subs.get(type(event), []) or []):
            try:
                cb(event)
            except Exception:
                # Best-effort: never crash the emitter for event handlers
                logging.getLogger(__name__).debug("Event handler failed.", exc_info=True)
