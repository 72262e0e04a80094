# -*- coding: utf-8 -*-
"""Category browser screen: breadcrumb bar, table and pager.

Rendering only; the ``CategoryBrowser`` controller owns the navigation,
pagination and dialog state.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from app.modal_state import ConfirmDelete, EditForm, ViewDetails
from domain.category_form import CATEGORY_FORM_FIELDS
from screens.base import ScreenBase
from services.category_browser import CategoryBrowser
from ui.common import dialogs
from ui.common.error_handler import run_guarded
from ui.common.guards import guarded
from ui.common.state import restore_header_state, save_header_state

log = logging.getLogger(__name__)

_COLUMNS = (("name", "Name"), ("description", "Description"), ("isActive", "Active"))
_HEADER_KEY = "categories/header_state"


class CategoryBrowserScreen(ScreenBase):
    title = "Categories"

    def __init__(
        self,
        browser_factory: Callable[..., CategoryBrowser],
        *,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.browser = browser_factory(on_changed=self.refresh)
        self._modal_scheduled = False
        self._build_ui()
        self.browser.refresh()

    def _build_ui(self) -> None:
        self.crumbs = QHBoxLayout()
        self.heading = QLabel(self)
        self.heading.setObjectName("ScreenTitle")

        self.search = QLineEdit(self)
        self.search.setPlaceholderText("Search categories...")
        self.search.textChanged.connect(self.browser.set_search)

        self.table = QTableWidget(0, len(_COLUMNS), self)
        self.table.setHorizontalHeaderLabels([label for _k, label in _COLUMNS])
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Interactive)
        self.table.cellDoubleClicked.connect(guarded(self._open_row, parent=self))
        restore_header_state(self.table.horizontalHeader(), _HEADER_KEY)
        self.table.horizontalHeader().sectionResized.connect(
            lambda *_: save_header_state(self.table.horizontalHeader(), _HEADER_KEY)
        )

        actions = QHBoxLayout()
        for label, slot in (
            ("Subcategories", lambda: self._with_selected(self.browser.enter)),
            ("View", lambda: self._with_selected(self.browser.view)),
            ("Edit", lambda: self._with_selected(self.browser.edit)),
            ("Delete", lambda: self._with_selected(self.browser.ask_delete)),
        ):
            btn = QPushButton(label, self)
            btn.clicked.connect(guarded(lambda _=False, s=slot: s(), parent=self))
            actions.addWidget(btn)
        actions.addStretch(1)

        self.pager = QHBoxLayout()

        root = QVBoxLayout(self)
        root.addLayout(self.crumbs)
        root.addWidget(self.heading)
        root.addWidget(self.search)
        root.addWidget(self.table, 1)
        root.addLayout(actions)
        root.addLayout(self.pager)

    # --------- helpers ---------
    @staticmethod
    def _clear(layout) -> None:
        while layout.count():
            item = layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.deleteLater()

    def _selected(self) -> Optional[dict]:
        row = self.table.currentRow()
        item = self.table.item(row, 0) if row >= 0 else None
        return item.data(Qt.UserRole) if item is not None else None

    def _with_selected(self, fn: Callable[[Any], None]) -> None:
        record = self._selected()
        if record is None:
            dialogs.info(self, "Categories", "Select a category first.")
            return
        fn(record)

    def _open_row(self, row: int, _col: int) -> None:
        item = self.table.item(row, 0)
        if item is not None:
            self.browser.enter(item.data(Qt.UserRole))

    # --------- rendering ---------
    def refresh(self) -> None:
        nav = self.browser.navigator
        self._clear(self.crumbs)
        for i, crumb in enumerate(nav.breadcrumbs):
            last = i == len(nav.breadcrumbs) - 1
            btn = QPushButton(crumb.name, self)
            btn.setFlat(True)
            btn.setEnabled(not last)
            btn.clicked.connect(lambda _=False, idx=i: self.browser.jump_to(idx))
            self.crumbs.addWidget(btn)
            if not last:
                self.crumbs.addWidget(QLabel(">", self))
        self.crumbs.addStretch(1)

        if self.browser.loading:
            self.heading.setText(f"{nav.title} (loading...)")
        elif self.browser.error:
            self.heading.setText(f"{nav.title} (failed to load)")
        else:
            self.heading.setText(nav.title)

        items = nav.visible_items()
        self.table.setRowCount(len(items))
        for row, record in enumerate(items):
            for col, (key, _label) in enumerate(_COLUMNS):
                value = record.get(key)
                text = ("Yes" if value else "No") if key == "isActive" else str(value or "")
                cell = QTableWidgetItem(text)
                if col == 0:
                    cell.setData(Qt.UserRole, record)
                self.table.setItem(row, col, cell)

        self._render_pager()
        self._render_modal()

    def _render_pager(self) -> None:
        nav = self.browser.navigator
        self._clear(self.pager)
        if nav.total_pages <= 1:
            return
        prev_btn = QPushButton("Previous", self)
        prev_btn.setEnabled(nav.has_prev)
        prev_btn.clicked.connect(self.browser.prev_page)
        self.pager.addWidget(prev_btn)
        for number in nav.visible_page_numbers():
            btn = QPushButton(str(number + 1), self)
            btn.setCheckable(True)
            btn.setChecked(number == nav.page)
            btn.clicked.connect(lambda _=False, n=number: self.browser.go_to_page(n))
            self.pager.addWidget(btn)
        next_btn = QPushButton("Next", self)
        next_btn.setEnabled(nav.has_next)
        next_btn.clicked.connect(self.browser.next_page)
        self.pager.addWidget(next_btn)
        self.pager.addStretch(1)

    def _render_modal(self) -> None:
        # Dialogs run their own event loop; never open one from inside refresh().
        if self.browser.modal.is_open and not self.browser.updating and not self._modal_scheduled:
            self._modal_scheduled = True
            QTimer.singleShot(0, self._show_modal)

    def _show_modal(self) -> None:
        try:
            if self.browser.modal.is_open and not self.browser.updating:
                run_guarded(self._run_modal, parent=self, title="Categories")
        finally:
            self._modal_scheduled = False
        # An update that failed before the dialog closed reopens the form.
        if isinstance(self.browser.modal.active, EditForm):
            self._render_modal()

    def _run_modal(self) -> None:
        active = self.browser.modal.active
        record = active.record or {}
        name = record.get("name") or record.get("id")
        if isinstance(active, ConfirmDelete):
            if dialogs.confirm(self, "Delete category", f"Delete {name}? This cannot be undone."):
                self.browser.confirm_delete()
            else:
                self.browser.close_modal()
        elif isinstance(active, ViewDetails):
            lines = [f"{k}: {v}" for k, v in sorted(record.items())]
            dialogs.info(self, str(name), "\n".join(lines))
            self.browser.close_modal()
        elif isinstance(active, EditForm):
            dlg = CategoryEditDialog(self.browser, f"Edit {name}", parent=self)
            if dlg.exec_() != QDialog.Accepted and not self.browser.updating:
                self.browser.close_modal()


class CategoryEditDialog(QDialog):
    """Edit form for one category; Save stays in the dialog while fields are invalid."""

    def __init__(self, browser: CategoryBrowser, title: str, parent=None) -> None:
        super().__init__(parent)
        self.browser = browser
        self.setWindowTitle(title)
        self._inputs: Dict[str, Any] = {}
        self._errors: Dict[str, QLabel] = {}

        values = browser.edit_values()
        form = QFormLayout()
        for key, label, kind in CATEGORY_FORM_FIELDS:
            if kind == "boolean":
                w = QCheckBox(self)
                w.setChecked(bool(values.get(key)))
            else:
                w = QLineEdit(self)
                value = values.get(key)
                w.setText("" if value is None else str(value))
            err = QLabel(self)
            err.setStyleSheet("color: #b00020;")
            err.hide()
            box = QVBoxLayout()
            box.addWidget(w)
            box.addWidget(err)
            form.addRow(label, box)
            self._inputs[key] = w
            self._errors[key] = err

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel, self)
        buttons.accepted.connect(guarded(self._save, parent=self))
        buttons.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(buttons)
        self._show_errors(browser.form_errors)

    def values(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, w in self._inputs.items():
            out[key] = w.isChecked() if isinstance(w, QCheckBox) else w.text()
        return out

    def _show_errors(self, errors) -> None:
        for key, label in self._errors.items():
            msg = errors.get(key)
            label.setText(msg or "")
            label.setVisible(bool(msg))

    def _save(self) -> None:
        if self.browser.submit_edit(self.values()):
            self.accept()
        else:
            self._show_errors(self.browser.form_errors)
