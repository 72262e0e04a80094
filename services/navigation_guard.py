# -*- coding: utf-8 -*-
"""Navigation guard: keeps unsaved edits from being lost silently.

Two states. In IDLE, a navigation request with a clean record runs right
away; with a dirty record it is captured as the pending intent and the
guard moves to INTERCEPTED, waiting for the user's decision:

- SAVE: save every dirty unit; on overall success run the pending intent.
  On failure the guard stays INTERCEPTED with the intent kept, so the user
  can retry, discard or cancel.
- DISCARD: accept the current working values as the new baseline (no
  network call), then run the pending intent.
- CANCEL: drop the pending intent, nothing else changes.

A request made while INTERCEPTED replaces the pending intent (no queue).
No PyQt imports here; the dialog lives in the UI layer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, Tuple, Union

from app.events import EventBus, NavigationIntercepted, NavigationResolved
from core.sections import SECTION_TITLES, Section

log = logging.getLogger(__name__)


class GuardState(str, Enum):
    IDLE = "idle"
    INTERCEPTED = "intercepted"


class GuardChoice(str, Enum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


_ALL_CHOICES = (GuardChoice.SAVE, GuardChoice.DISCARD, GuardChoice.CANCEL)


@dataclass(frozen=True)
class SwitchSection:
    target: Section
    allowed_choices: ClassVar[Tuple[GuardChoice, ...]] = _ALL_CHOICES

    def describe(self) -> str:
        return f"switch to {SECTION_TITLES.get(self.target, str(self.target))}"


@dataclass(frozen=True)
class GoBack:
    allowed_choices: ClassVar[Tuple[GuardChoice, ...]] = _ALL_CHOICES

    def describe(self) -> str:
        return "go back"


@dataclass(frozen=True)
class LeavePage:
    allowed_choices: ClassVar[Tuple[GuardChoice, ...]] = _ALL_CHOICES

    def describe(self) -> str:
        return "leave the editor"


@dataclass(frozen=True)
class ReloadRecord:
    """Reload from the server (after a conflict). Saving first makes no sense here."""

    allowed_choices: ClassVar[Tuple[GuardChoice, ...]] = (GuardChoice.DISCARD, GuardChoice.CANCEL)

    def describe(self) -> str:
        return "reload the record"


NavigationIntent = Union[SwitchSection, GoBack, LeavePage, ReloadRecord]


class NavigationGuard:
    """State machine around a pending navigation intent.

    Collaborators are plain callables:
    - ``is_dirty()``: current dirty flag
    - ``execute(intent)``: perform the navigation
    - ``save_all(on_done)``: save every dirty unit, ``on_done(ok: bool)``
    - ``discard()``: re-baseline from the working copy
    """

    def __init__(
        self,
        *,
        is_dirty: Callable[[], bool],
        execute: Callable[[Any], None],
        save_all: Callable[[Callable[[bool], None]], None],
        discard: Callable[[], None],
        bus: Optional[EventBus] = None,
    ) -> None:
        self._is_dirty = is_dirty
        self._execute = execute
        self._save_all = save_all
        self._discard = discard
        self.bus = bus or EventBus()
        self.state = GuardState.IDLE
        self.pending_intent: Optional[NavigationIntent] = None
        self.saving = False

    @property
    def intercepted(self) -> bool:
        return self.state == GuardState.INTERCEPTED

    def allowed_choices(self) -> Tuple[GuardChoice, ...]:
        if self.pending_intent is None:
            return ()
        return tuple(self.pending_intent.allowed_choices)

    def request(self, intent: NavigationIntent) -> bool:
        """Ask to navigate. True if it ran immediately, False if intercepted."""
        if not self._is_dirty() and not self.saving:
            self._resolve(None)
            self._execute(intent)
            return True
        if self.intercepted:
            log.debug("pending intent replaced: %r -> %r", self.pending_intent, intent)
        self.pending_intent = intent
        self.state = GuardState.INTERCEPTED
        self.bus.emit(NavigationIntercepted(intent))
        return False

    def choose(self, choice: GuardChoice) -> None:
        choice = GuardChoice(choice)
        intent = self.pending_intent
        if not self.intercepted or intent is None:
            raise RuntimeError("No navigation is waiting for a decision")
        if choice not in intent.allowed_choices:
            raise ValueError(f"{choice.value!r} is not offered when asked to {intent.describe()}")

        if choice == GuardChoice.CANCEL:
            self._resolve(choice)
            return

        if choice == GuardChoice.DISCARD:
            self._discard()
            self._resolve(choice)
            self._execute(intent)
            return

        if self.saving:
            log.debug("save already running for the pending navigation")
            return
        self.saving = True
        self._save_all(self._on_saved)

    def _on_saved(self, ok: bool) -> None:
        self.saving = False
        intent = self.pending_intent
        if not self.intercepted or intent is None:
            return
        if not ok or self._is_dirty():
            log.info("navigation kept pending: save did not clear all changes")
            return
        self._resolve(GuardChoice.SAVE)
        self._execute(intent)

    def _resolve(self, choice: Optional[GuardChoice]) -> None:
        intent = self.pending_intent
        self.pending_intent = None
        self.state = GuardState.IDLE
        if intent is not None:
            self.bus.emit(NavigationResolved(intent, choice.value if choice is not None else None))

    def confirm_unload(self) -> bool:
        """Whether a native "leave page?" confirmation should be shown."""
        return bool(self._is_dirty())
