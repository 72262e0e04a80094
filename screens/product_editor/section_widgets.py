# -*- coding: utf-8 -*-
"""Widgets for the product editor tabs.

Each panel renders one section of the working copy and reports user edits
through a callback; it never keeps its own copy of the record.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from core.keys import MediaKeys as MK
from core.keys import ProductKeys as K
from core.keys import StockKeys as SK
from core.keys import VariantKeys as VK
from core.sections import Section
from domain.product_schema import FieldKind, VARIANT_FIELDS, section_fields

log = logging.getLogger(__name__)

EditCallback = Callable[[str, Any], None]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class SectionForm(QWidget):
    """Form for the flat sections (basic, pricing, details)."""

    def __init__(self, section: Section, on_edit: EditCallback, parent=None) -> None:
        super().__init__(parent)
        self.section = section
        self._on_edit = on_edit
        self._loading = False
        self._inputs: Dict[str, QWidget] = {}
        self._errors: Dict[str, QLabel] = {}

        form = QFormLayout(self)
        for spec in section_fields(section):
            if spec.kind == FieldKind.BOOLEAN:
                w = QCheckBox(self)
                w.toggled.connect(lambda checked, n=spec.name: self._edited(n, bool(checked)))
            else:
                w = QLineEdit(self)
                w.textEdited.connect(lambda text, n=spec.name: self._edited(n, text))
            err = QLabel(self)
            err.setObjectName("FieldError")
            err.setStyleSheet("color: #b00020;")
            err.hide()
            box = QVBoxLayout()
            box.setContentsMargins(0, 0, 0, 0)
            box.addWidget(w)
            box.addWidget(err)
            form.addRow(spec.label, box)
            self._inputs[spec.name] = w
            self._errors[spec.name] = err

    def _edited(self, name: str, value: Any) -> None:
        if not self._loading:
            self._on_edit(name, value)

    def load(self, values: Mapping[str, Any]) -> None:
        self._loading = True
        try:
            for name, w in self._inputs.items():
                value = values.get(name)
                if isinstance(w, QCheckBox):
                    w.setChecked(bool(value))
                elif isinstance(w, QLineEdit) and w.text() != _text(value):
                    w.setText(_text(value))
        finally:
            self._loading = False

    def set_errors(self, errors: Mapping[str, str]) -> None:
        for name, label in self._errors.items():
            msg = errors.get(name)
            label.setText(msg or "")
            label.setVisible(bool(msg))


class MediaPanel(QWidget):
    """Ordered image/video list with add/remove/reorder/primary actions."""

    def __init__(self, media_field: str, actions: Mapping[str, Callable[..., Any]], parent=None) -> None:
        super().__init__(parent)
        self.media_field = media_field
        self._actions = actions

        self.list = QListWidget(self)
        self.list.setSelectionMode(QAbstractItemView.SingleSelection)

        buttons = QHBoxLayout()
        for label, slot in (
            ("Add...", self._add),
            ("Remove", lambda: self._with_selected(lambda ref: self._actions["remove"](ref))),
            ("Up", lambda: self._with_selected(lambda ref: self._actions["move"](ref, self.list.currentRow() - 1))),
            ("Down", lambda: self._with_selected(lambda ref: self._actions["move"](ref, self.list.currentRow() + 1))),
            ("Set primary", lambda: self._with_selected(lambda ref: self._actions["primary"](ref))),
        ):
            btn = QPushButton(label, self)
            btn.clicked.connect(slot)
            buttons.addWidget(btn)
        buttons.addStretch(1)

        lay = QVBoxLayout(self)
        lay.addWidget(QLabel("Images" if media_field == K.IMAGES else "Videos", self))
        lay.addWidget(self.list, 1)
        lay.addLayout(buttons)

    def _add(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Add media")
        for path in paths:
            self._actions["add"](path)

    def _with_selected(self, fn: Callable[[Any], None]) -> None:
        item = self.list.currentItem()
        if item is None:
            return
        fn(item.data(Qt.UserRole))

    def load(self, items: List[Mapping[str, Any]]) -> None:
        current = self.list.currentRow()
        self.list.clear()
        for it in items:
            if it.get(MK.ID) is None:
                text = f"[pending] {it.get(MK.LOCAL_PATH)}"
                if it.get(MK.ERROR):
                    text += f"  (upload failed: {it.get(MK.ERROR)}; save again to retry)"
                ref = it.get(MK.LOCAL_KEY)
            else:
                text = _text(it.get(MK.URL)) or f"#{it.get(MK.ID)}"
                ref = it.get(MK.ID)
            if it.get(MK.IS_PRIMARY):
                text = "* " + text
            item = QListWidgetItem(text)
            item.setData(Qt.UserRole, ref)
            self.list.addItem(item)
        if 0 <= current < self.list.count():
            self.list.setCurrentRow(current)


class VariantsTable(QTableWidget):
    """One row per variant; editing a cell edits that variant."""

    def __init__(self, on_edit: Callable[[Any, str, Any], None], parent=None) -> None:
        self._fields = list(VARIANT_FIELDS)
        super().__init__(0, len(self._fields), parent)
        self.setHorizontalHeaderLabels([f.label for f in self._fields])
        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self._on_edit = on_edit
        self._loading = False
        self.itemChanged.connect(self._changed)

    def selected_variant_id(self) -> Optional[Any]:
        row = self.currentRow()
        if row < 0 or self.item(row, 0) is None:
            return None
        return self.item(row, 0).data(Qt.UserRole)

    def _changed(self, item: QTableWidgetItem) -> None:
        if self._loading:
            return
        spec = self._fields[item.column()]
        variant_id = self.item(item.row(), 0).data(Qt.UserRole)
        if spec.kind == FieldKind.BOOLEAN:
            value = item.checkState() == Qt.Checked
        else:
            value = item.text()
        self._on_edit(variant_id, spec.name, value)

    def load(self, variants: List[Mapping[str, Any]]) -> None:
        self._loading = True
        try:
            self.setRowCount(len(variants))
            for row, variant in enumerate(variants):
                for col, spec in enumerate(self._fields):
                    item = QTableWidgetItem()
                    if spec.kind == FieldKind.BOOLEAN:
                        item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
                        item.setCheckState(Qt.Checked if variant.get(spec.name) else Qt.Unchecked)
                    else:
                        item.setText(_text(variant.get(spec.name)))
                    if col == 0:
                        item.setData(Qt.UserRole, variant.get(VK.ID))
                    self.setItem(row, col, item)
        finally:
            self._loading = False


class StockTable(QTableWidget):
    """Warehouse -> quantity / low stock threshold."""

    HEADERS = ("Warehouse", "Quantity", "Low stock threshold")

    def __init__(self, on_set: Callable[[str, Any, Any], None], parent=None) -> None:
        super().__init__(0, len(self.HEADERS), parent)
        self.setHorizontalHeaderLabels(list(self.HEADERS))
        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self._on_set = on_set
        self._loading = False
        self.itemChanged.connect(self._changed)

    def selected_warehouse(self) -> Optional[str]:
        row = self.currentRow()
        item = self.item(row, 0) if row >= 0 else None
        return item.text() if item is not None else None

    def _changed(self, item: QTableWidgetItem) -> None:
        if self._loading or item.column() == 0:
            return
        row = item.row()
        warehouse = self.item(row, 0).text()
        qty = self.item(row, 1).text() if self.item(row, 1) else None
        threshold = self.item(row, 2).text() if self.item(row, 2) else None
        self._on_set(warehouse, qty, threshold)

    def load(self, stocks: Mapping[str, Mapping[str, Any]]) -> None:
        self._loading = True
        try:
            self.setRowCount(len(stocks))
            for row, (warehouse, entry) in enumerate(sorted(stocks.items())):
                wh = QTableWidgetItem(str(warehouse))
                wh.setFlags(wh.flags() & ~Qt.ItemIsEditable)
                self.setItem(row, 0, wh)
                self.setItem(row, 1, QTableWidgetItem(_text((entry or {}).get(SK.QUANTITY))))
                self.setItem(row, 2, QTableWidgetItem(_text((entry or {}).get(SK.LOW_STOCK_THRESHOLD))))
        finally:
            self._loading = False
