# -*- coding: utf-8 -*-
"""Product editor session (no PyQt imports).

Composes the working copy, the dirty tracker, the section save controller
and the navigation guard for one record. The screen talks only to this
object; it holds no editing state of its own.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from app.dirty_tracker import DirtyTracker
from app.events import (
    DirtyChanged,
    EventBus,
    RecordLoaded,
    SectionActivated,
    SectionSaved,
    SectionSaveFailed,
)
from core.keys import ProductKeys as K
from core.sections import Section
from core.types import SaveKey
from domain.location import location_with_section, section_from_location
from domain.working_copy import WorkingCopy
from services.errors import ConflictError, NotFoundError, describe
from services.navigation_guard import (
    GoBack,
    GuardChoice,
    LeavePage,
    NavigationGuard,
    NavigationIntent,
    ReloadRecord,
    SwitchSection,
)
from services.notifications import Notifier, destructive
from services.resource_client import ResourceClient
from services.section_save import SaveCallback, SaveResult, SectionSaveController
from services.tasks.runner_core import ImmediateRunner

log = logging.getLogger(__name__)


class ProductEditorSession:
    def __init__(
        self,
        client: ResourceClient,
        record_id: str,
        *,
        runner: Any = None,
        notifier: Optional[Notifier] = None,
        bus: Optional[EventBus] = None,
        location: str = "",
        on_back: Optional[Callable[[], None]] = None,
        on_leave: Optional[Callable[[], None]] = None,
        on_exit: Optional[Callable[[], None]] = None,
        on_location_changed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.client = client
        self.record_id = str(record_id)
        self.runner = runner or ImmediateRunner()
        self.notifier = notifier
        self.bus = bus or EventBus()
        self.location = location
        self.active_section: Section = section_from_location(location)
        self._on_back = on_back
        self._on_leave = on_leave
        self._on_exit = on_exit
        self._on_location_changed = on_location_changed

        self.working: Optional[WorkingCopy] = None
        self.tracker: Optional[DirtyTracker] = None
        self.saver: Optional[SectionSaveController] = None
        self.loading = False
        self.closed = False
        self._load_token = 0
        self._published = (False, ())

        self.guard = NavigationGuard(
            is_dirty=lambda: self.is_dirty,
            execute=self._execute,
            save_all=lambda done: self.save_all_dirty(lambda results: done(all(r.ok for r in results))),
            discard=self._discard,
            bus=self.bus,
        )
        self.bus.subscribe(SectionSaved, lambda _e: self._publish_dirty())
        self.bus.subscribe(SectionSaveFailed, self._on_save_failed)

    # ------------------------------------------------------------------
    # load
    # ------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self.working is not None and self.tracker is not None

    def load(self, on_done: Optional[Callable[[bool], None]] = None) -> None:
        self._load_token += 1
        token = self._load_token
        self.loading = True
        self.runner.submit(
            lambda: self.client.fetch(self.record_id),
            lambda record: self._on_loaded(token, record, on_done),
            lambda exc: self._on_load_failed(token, exc, on_done),
            label=f"load product {self.record_id}",
        )

    def _on_loaded(self, token: int, record: Dict[str, Any], on_done) -> None:
        if self.closed or token != self._load_token:
            log.debug("discarding stale load result for %s", self.record_id)
            return
        self.loading = False
        if self.saver is not None:
            self.saver.dispose()
        record = dict(record or {})
        record.setdefault(K.ID, self.record_id)
        working = WorkingCopy.from_record(record)
        tracker = DirtyTracker(on_change=lambda _dirty: self._publish_dirty())
        tracker.attach(working)
        tracker.capture_baseline(working)
        working.on_change(lambda _section: self._publish_dirty())
        self.working = working
        self.tracker = tracker
        self.saver = SectionSaveController(
            self.client, working, tracker, self.runner, notifier=self.notifier, bus=self.bus
        )
        log.info("product %s loaded (section=%s)", self.record_id, self.active_section.value)
        self._publish_dirty()
        self.bus.emit(RecordLoaded(self.record_id))
        if on_done is not None:
            on_done(True)

    def _on_load_failed(self, token: int, exc: BaseException, on_done) -> None:
        if self.closed or token != self._load_token:
            return
        self.loading = False
        log.warning("loading product %s failed: %s", self.record_id, exc)
        self._notify(destructive("Failed to load product", describe(exc)))
        if isinstance(exc, NotFoundError):
            self._exit()
        if on_done is not None:
            on_done(False)

    def _require_loaded(self) -> WorkingCopy:
        if self.working is None:
            raise RuntimeError("The product is not loaded yet")
        return self.working

    # ------------------------------------------------------------------
    # dirty state
    # ------------------------------------------------------------------
    @property
    def is_dirty(self) -> bool:
        return bool(self.tracker is not None and self.tracker.is_dirty)

    @property
    def dirty_sections(self) -> List[Section]:
        return self.tracker.dirty_sections if self.tracker is not None else []

    def _publish_dirty(self) -> None:
        state = (self.is_dirty, tuple(self.dirty_sections))
        if state == self._published:
            return
        self._published = state
        self.bus.emit(DirtyChanged(state[0], state[1]))

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    def set_field(self, section: Section, name: str, value: Any) -> None:
        self._require_loaded().set_field(Section(section), name, value)

    def set_variant_field(self, variant_id: Any, name: str, value: Any) -> None:
        self._require_loaded().set_variant_field(variant_id, name, value)

    def add_image(self, local_path: str, *, field: str = K.IMAGES, variant_id: Any = None) -> str:
        return self._require_loaded().add_media(local_path, field=field, variant_id=variant_id)

    def remove_image(self, ref: Any, *, field: str = K.IMAGES, variant_id: Any = None) -> None:
        self._require_loaded().remove_media(ref, field=field, variant_id=variant_id)

    def move_image(self, ref: Any, new_index: int, *, field: str = K.IMAGES, variant_id: Any = None) -> None:
        self._require_loaded().move_media(ref, new_index, field=field, variant_id=variant_id)

    def set_primary_image(self, ref: Any, *, field: str = K.IMAGES, variant_id: Any = None) -> None:
        self._require_loaded().set_primary_media(ref, field=field, variant_id=variant_id)

    def set_stock(self, warehouse_id: Any, quantity: Any, low_stock_threshold: Any = None, batches: Any = None) -> None:
        self._require_loaded().set_stock(warehouse_id, quantity, low_stock_threshold, batches)

    def remove_stock(self, warehouse_id: Any) -> None:
        self._require_loaded().remove_stock(warehouse_id)

    # ------------------------------------------------------------------
    # saving
    # ------------------------------------------------------------------
    def save_section(self, section: Section, item_id: Any = None, on_done: Optional[SaveCallback] = None) -> Optional[SaveResult]:
        self._require_loaded()
        return self.saver.save(SaveKey(Section(section), item_id), on_done)

    def save_all_dirty(self, on_done: Callable[[List[SaveResult]], None]) -> None:
        self._require_loaded()
        self.saver.save_all_dirty(on_done)

    def is_saving(self, section: Optional[Section] = None, item_id: Any = None) -> bool:
        if self.saver is None:
            return False
        if section is None:
            return self.saver.is_saving()
        return self.saver.is_saving(SaveKey(Section(section), item_id))

    def field_errors(self, section: Section, item_id: Any = None) -> Dict[str, str]:
        if self.saver is None:
            return {}
        return self.saver.field_errors(SaveKey(Section(section), item_id))

    def _on_save_failed(self, event: SectionSaveFailed) -> None:
        self._publish_dirty()
        if isinstance(event.error, NotFoundError):
            self._exit()
        elif isinstance(event.error, ConflictError):
            self.request_navigation(ReloadRecord())

    # ------------------------------------------------------------------
    # navigation
    # ------------------------------------------------------------------
    def request_navigation(self, intent: NavigationIntent) -> bool:
        return self.guard.request(intent)

    def switch_section(self, section: Any) -> bool:
        return self.request_navigation(SwitchSection(Section(section)))

    def go_back(self) -> bool:
        return self.request_navigation(GoBack())

    def leave(self) -> bool:
        return self.request_navigation(LeavePage())

    def reload(self) -> bool:
        return self.request_navigation(ReloadRecord())

    def choose_save(self) -> None:
        self.guard.choose(GuardChoice.SAVE)

    def choose_discard(self) -> None:
        self.guard.choose(GuardChoice.DISCARD)

    def choose_cancel(self) -> None:
        self.guard.choose(GuardChoice.CANCEL)

    def confirm_unload(self) -> bool:
        return self.guard.confirm_unload()

    def _discard(self) -> None:
        # Keeps the current values: they become the new baseline.
        if self.tracker is not None and self.working is not None:
            self.tracker.capture_baseline(self.working)
            self._publish_dirty()

    def _execute(self, intent: NavigationIntent) -> None:
        log.debug("navigation: %s", intent.describe())
        if isinstance(intent, SwitchSection):
            self._activate(intent.target)
        elif isinstance(intent, GoBack):
            if self._on_back is not None:
                self._on_back()
        elif isinstance(intent, LeavePage):
            if self._on_leave is not None:
                self._on_leave()
        elif isinstance(intent, ReloadRecord):
            self.load()

    def _activate(self, section: Section) -> None:
        self.active_section = section
        self.location = location_with_section(self.location, section)
        if self._on_location_changed is not None:
            self._on_location_changed(self.location)
        self.bus.emit(SectionActivated(section, self.location))

    def _exit(self) -> None:
        if self._on_exit is not None:
            self._on_exit()

    # ------------------------------------------------------------------
    # teardown
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.closed = True
        if self.saver is not None:
            self.saver.dispose()

    def _notify(self, notification) -> None:
        if self.notifier is not None:
            self.notifier.notify(notification)
