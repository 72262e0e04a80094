# -*- coding: utf-8 -*-
"""Product editor screen.

One tab per section, a Save button per tab (disabled while that section's
save is in flight) and the unsaved-changes dialog. All state lives in the
``ProductEditorSession``; this screen only renders it and forwards edits.

Tab switches are never performed by the QTabWidget itself: the click is
reverted and turned into a navigation request, and the tab only changes
once the session activates the section.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from PyQt5.QtCore import QSignalBlocker, QTimer, pyqtSignal
from PyQt5.QtWidgets import (
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from app.events import (
    DirtyChanged,
    NavigationIntercepted,
    RecordLoaded,
    SectionActivated,
    SectionSaved,
    SectionSaveFailed,
    SectionSaveStarted,
)
from core.keys import ProductKeys as K
from core.keys import StockKeys as SK
from core.sections import SECTION_ORDER, SECTION_TITLES, Section
from screens.base import ScreenBase
from screens.product_editor.section_widgets import MediaPanel, SectionForm, StockTable, VariantsTable
from services.navigation_guard import GuardChoice, LeavePage
from services.product_editor import ProductEditorSession
from ui.common import dialogs
from ui.common.guards import guarded
from ui.common.state import get_last_section, set_last_section

log = logging.getLogger(__name__)

_TO_GUARD = {
    dialogs.SaveChoice.SAVE: GuardChoice.SAVE,
    dialogs.SaveChoice.DISCARD: GuardChoice.DISCARD,
    dialogs.SaveChoice.CANCEL: GuardChoice.CANCEL,
}


class ProductEditorScreen(ScreenBase):
    title = "Product editor"
    title_changed = pyqtSignal(str)
    close_requested = pyqtSignal()

    def __init__(
        self,
        session_factory: Callable[..., ProductEditorSession],
        record_id: str,
        *,
        on_back: Optional[Callable[[], None]] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.record_id = str(record_id)
        self._on_back = on_back
        self._leave_allowed = False
        self._asking = False

        last = get_last_section(self.record_id)
        location = f"?tab={last}" if last else ""
        self.session: ProductEditorSession = session_factory(
            self.record_id,
            location=location,
            on_back=self._back,
            on_leave=self._leave,
            on_exit=self._back,
        )
        bus = self.session.bus
        bus.subscribe(RecordLoaded, lambda _e: self.refresh())
        bus.subscribe(DirtyChanged, self._on_dirty_changed)
        bus.subscribe(SectionActivated, self._on_section_activated)
        bus.subscribe(SectionSaveStarted, lambda e: self._update_save_buttons())
        bus.subscribe(SectionSaved, self._on_section_saved)
        bus.subscribe(SectionSaveFailed, self._on_section_save_failed)
        bus.subscribe(NavigationIntercepted, lambda _e: QTimer.singleShot(0, self._ask_guard))

        self._build_ui()
        self.session.load()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        self.tabs = QTabWidget(self)
        self._save_buttons: Dict[Section, QPushButton] = {}
        self._forms: Dict[Section, SectionForm] = {}
        self._pages: Dict[Section, QWidget] = {}

        for section in SECTION_ORDER:
            page = QWidget(self.tabs)
            lay = QVBoxLayout(page)
            lay.addWidget(self._section_body(section, page), 1)
            bar = QHBoxLayout()
            bar.addStretch(1)
            label = "Save selected variant" if section == Section.VARIANTS else f"Save {SECTION_TITLES[section].lower()}"
            btn = QPushButton(label, page)
            btn.clicked.connect(guarded(lambda _=False, s=section: self._save(s), parent=self))
            bar.addWidget(btn)
            lay.addLayout(bar)
            self._save_buttons[section] = btn
            self._pages[section] = page
            self.tabs.addTab(page, SECTION_TITLES[section])
        self.tabs.currentChanged.connect(self._on_tab_clicked)

        self.back_btn = QPushButton("< Back", self)
        self.back_btn.clicked.connect(lambda: self.session.go_back())
        self.status = QLabel("Loading...", self)

        top = QHBoxLayout()
        top.addWidget(self.back_btn)
        top.addWidget(self.status, 1)

        root = QVBoxLayout(self)
        root.addLayout(top)
        root.addWidget(self.tabs, 1)
        self._select_tab(self.session.active_section)
        self._update_save_buttons()

    def _section_body(self, section: Section, parent: QWidget) -> QWidget:
        if section in (Section.BASIC, Section.PRICING, Section.DETAILS):
            form = SectionForm(section, lambda name, value, s=section: self.session.set_field(s, name, value), parent)
            self._forms[section] = form
            return form
        if section == Section.MEDIA:
            body = QWidget(parent)
            lay = QHBoxLayout(body)
            self.images_panel = MediaPanel(K.IMAGES, self._media_actions(K.IMAGES), body)
            self.videos_panel = MediaPanel(K.VIDEOS, self._media_actions(K.VIDEOS), body)
            lay.addWidget(self.images_panel)
            lay.addWidget(self.videos_panel)
            return body
        if section == Section.VARIANTS:
            body = QWidget(parent)
            lay = QVBoxLayout(body)
            self.variants_table = VariantsTable(self.session.set_variant_field, body)
            self.variants_table.itemSelectionChanged.connect(self._load_variant_images)
            self.variant_images_panel = MediaPanel(K.IMAGES, self._variant_media_actions(), body)
            lay.addWidget(self.variants_table, 2)
            lay.addWidget(self.variant_images_panel, 1)
            return body
        body = QWidget(parent)
        lay = QVBoxLayout(body)
        self.stock_table = StockTable(self._set_stock, body)
        bar = QHBoxLayout()
        add_btn = QPushButton("Assign warehouse...", body)
        add_btn.clicked.connect(guarded(self._assign_warehouse, parent=self))
        rm_btn = QPushButton("Unassign", body)
        rm_btn.clicked.connect(guarded(self._unassign_warehouse, parent=self))
        bar.addWidget(add_btn)
        bar.addWidget(rm_btn)
        bar.addStretch(1)
        lay.addWidget(self.stock_table, 1)
        lay.addLayout(bar)
        return body

    def _media_actions(self, media_field: str) -> Dict[str, Callable[..., Any]]:
        s = self.session
        return {
            "add": lambda path: s.add_image(path, field=media_field),
            "remove": lambda ref: s.remove_image(ref, field=media_field),
            "move": lambda ref, idx: s.move_image(ref, idx, field=media_field),
            "primary": lambda ref: s.set_primary_image(ref, field=media_field),
        }

    def _variant_media_actions(self) -> Dict[str, Callable[..., Any]]:
        s = self.session

        def _vid():
            vid = self.variants_table.selected_variant_id()
            if vid is None:
                raise ValueError("Select a variant first")
            return vid

        return {
            "add": lambda path: s.add_image(path, variant_id=_vid()),
            "remove": lambda ref: s.remove_image(ref, variant_id=_vid()),
            "move": lambda ref, idx: s.move_image(ref, idx, variant_id=_vid()),
            "primary": lambda ref: s.set_primary_image(ref, variant_id=_vid()),
        }

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        if not self.session.loaded:
            return
        with self.ui_refresh_scope():
            for section in SECTION_ORDER:
                self._render_section(section)
        self._select_tab(self.session.active_section)
        self._update_save_buttons()
        self._update_status()

    def _render_section(self, section: Section) -> None:
        working = self.session.working
        if section in self._forms:
            self._forms[section].load(working.values(section))
            self._forms[section].set_errors(self.session.field_errors(section))
        elif section == Section.MEDIA:
            self.images_panel.load(working.media(K.IMAGES))
            self.videos_panel.load(working.media(K.VIDEOS))
        elif section == Section.VARIANTS:
            self.variants_table.load(working.get(Section.VARIANTS, K.VARIANTS) or [])
            self._load_variant_images()
        elif section == Section.INVENTORY:
            self.stock_table.load(working.stocks())

    def _load_variant_images(self) -> None:
        vid = self.variants_table.selected_variant_id()
        if vid is None or not self.session.loaded:
            self.variant_images_panel.load([])
            return
        self.variant_images_panel.load(self.session.working.media(variant_id=vid))

    def _select_tab(self, section: Section) -> None:
        index = SECTION_ORDER.index(section)
        if self.tabs.currentIndex() != index:
            blocker = QSignalBlocker(self.tabs)
            try:
                self.tabs.setCurrentIndex(index)
            finally:
                del blocker

    def _update_save_buttons(self) -> None:
        for section, btn in self._save_buttons.items():
            if section == Section.VARIANTS:
                busy = self.session.is_saving(section, self.variants_table.selected_variant_id())
            else:
                busy = self.session.is_saving(section)
            btn.setEnabled(self.session.loaded and not busy)

    def _update_status(self) -> None:
        dirty = self.session.dirty_sections
        for section in SECTION_ORDER:
            star = " *" if section in dirty else ""
            self.tabs.setTabText(SECTION_ORDER.index(section), SECTION_TITLES[section] + star)
        self.status.setText("Unsaved changes" if dirty else "All changes saved")
        self.title_changed.emit(f"Product {self.record_id}" + (" *" if dirty else ""))

    # ------------------------------------------------------------------
    # session events
    # ------------------------------------------------------------------
    def _on_dirty_changed(self, _event: DirtyChanged) -> None:
        self._update_status()
        # Media/variant/stock lists change shape on edits; forms keep focus.
        if self.session.loaded:
            with self.ui_refresh_scope():
                for section in (Section.MEDIA, Section.VARIANTS, Section.INVENTORY):
                    self._render_section(section)

    def _on_section_activated(self, event: SectionActivated) -> None:
        self._select_tab(event.section)
        set_last_section(self.record_id, event.section.value)

    def _on_section_saved(self, event: SectionSaved) -> None:
        if self.session.loaded:
            with self.ui_refresh_scope():
                self._render_section(event.key.section)
        self._update_save_buttons()
        self._update_status()

    def _on_section_save_failed(self, event: SectionSaveFailed) -> None:
        self._on_section_saved(event)
        # A failed Save from the dialog keeps the navigation pending: ask again.
        QTimer.singleShot(0, self._ask_guard)

    # ------------------------------------------------------------------
    # actions
    # ------------------------------------------------------------------
    def _save(self, section: Section) -> None:
        item_id = None
        if section == Section.VARIANTS:
            item_id = self.variants_table.selected_variant_id()
            if item_id is None:
                dialogs.info(self, "Variants", "Select the variant to save.")
                return
        self.session.save_section(section, item_id)
        self._update_save_buttons()

    def _set_stock(self, warehouse: str, quantity: Any, threshold: Any) -> None:
        current = self.session.working.stocks().get(str(warehouse)) or {}
        self.session.set_stock(warehouse, quantity, threshold, current.get(SK.BATCHES))

    def _assign_warehouse(self) -> None:
        warehouse, ok = QInputDialog.getText(self, "Assign warehouse", "Warehouse id:")
        if ok and warehouse.strip():
            self.session.set_stock(warehouse.strip(), 0)

    def _unassign_warehouse(self) -> None:
        warehouse = self.stock_table.selected_warehouse()
        if warehouse is not None:
            self.session.remove_stock(warehouse)

    def _on_tab_clicked(self, index: int) -> None:
        target = SECTION_ORDER[index]
        self._select_tab(self.session.active_section)
        if target != self.session.active_section:
            self.session.switch_section(target)

    # ------------------------------------------------------------------
    # navigation guard
    # ------------------------------------------------------------------
    def _ask_guard(self) -> None:
        guard = self.session.guard
        if self._asking or not guard.intercepted or guard.saving:
            return
        intent = guard.pending_intent
        allowed = [c for c in dialogs.SaveChoice if _TO_GUARD[c] in guard.allowed_choices()]
        self._asking = True
        try:
            choice = dialogs.ask_save_discard_cancel(
                self,
                "Unsaved changes",
                f"You have unsaved changes. Save them before you {intent.describe()}?",
                allowed=allowed,
            )
        finally:
            self._asking = False
        if guard.pending_intent is None:
            return
        self.session.guard.choose(_TO_GUARD[choice])

    def _back(self) -> None:
        if self._on_back is not None:
            self._on_back()

    def _leave(self) -> None:
        self._leave_allowed = True
        self.close_requested.emit()

    def on_view_activated(self, reason: str = "") -> None:
        # Back on screen: leaving must be confirmed again.
        self._leave_allowed = False
        super().on_view_activated(reason)

    def can_deactivate(self, parent=None) -> bool:
        if self._leave_allowed or not self.session.confirm_unload():
            return True
        self.session.request_navigation(LeavePage())
        return False

    def dispose(self) -> None:
        self.session.close()
