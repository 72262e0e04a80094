# -*- coding: utf-8 -*-
"""
domain/working_copy.py

The live, mutable state of the record being edited.

Owned by the UI layer. Every mutation goes through a method of this class
so that change listeners (the dirty tracker) run synchronously, before
control returns to the event loop. There is no other way to change the
working copy; ``values()`` always hands out deep copies.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.keys import MediaKeys as MK
from core.keys import ProductKeys as K
from core.keys import StockKeys as SK
from core.keys import VariantKeys as VK
from core.sections import Section
from domain.product_schema import PRODUCT_SCHEMA, field_spec, split_record

log = logging.getLogger(__name__)

ChangeListener = Callable[[Section], None]

_MEDIA_FIELDS = (K.IMAGES, K.VIDEOS)


class WorkingCopy:
    def __init__(self, record_id: str, sections: Optional[Mapping[Section, Mapping[str, Any]]] = None) -> None:
        self.record_id = str(record_id)
        self._sections: Dict[Section, Dict[str, Any]] = {sec: {} for sec in PRODUCT_SCHEMA}
        for sec, values in (sections or {}).items():
            self._sections[Section(sec)] = copy.deepcopy(dict(values or {}))
        self._listeners: List[ChangeListener] = []

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "WorkingCopy":
        record_id = record.get(K.ID)
        if record_id is None:
            raise ValueError("record has no id")
        return cls(str(record_id), split_record(record))

    # --------- observation ---------
    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _changed(self, section: Section) -> None:
        for cb in list(self._listeners):
            cb(section)

    # --------- reads ---------
    def values(self, section: Section) -> Dict[str, Any]:
        return copy.deepcopy(self._sections.get(section, {}))

    def all_values(self) -> Dict[Section, Dict[str, Any]]:
        return {sec: self.values(sec) for sec in self._sections}

    def get(self, section: Section, name: str, default: Any = None) -> Any:
        return copy.deepcopy(self._sections.get(section, {}).get(name, default))

    def variant(self, variant_id: Any) -> Optional[Dict[str, Any]]:
        found = self._find_variant(variant_id)
        return copy.deepcopy(found) if found is not None else None

    def variant_ids(self) -> List[Any]:
        return [v.get(VK.ID) for v in self._variants()]

    # --------- scalar fields ---------
    def set_field(self, section: Section, name: str, value: Any) -> None:
        if field_spec(section, name) is None:
            raise KeyError(f"{name!r} is not a field of section {section.value!r}")
        self._sections[section][name] = copy.deepcopy(value)
        self._changed(section)

    def replace_section(self, section: Section, values: Mapping[str, Any]) -> None:
        self._sections[section] = copy.deepcopy(dict(values or {}))
        self._changed(section)

    def merge_section(self, section: Section, values: Mapping[str, Any], *, notify: bool = True) -> None:
        self._sections[section].update(copy.deepcopy(dict(values or {})))
        if notify:
            self._changed(section)

    # --------- variants ---------
    def _variants(self) -> List[Dict[str, Any]]:
        variants = self._sections[Section.VARIANTS].get(K.VARIANTS)
        if not isinstance(variants, list):
            variants = []
            self._sections[Section.VARIANTS][K.VARIANTS] = variants
        return variants

    def _find_variant(self, variant_id: Any) -> Optional[Dict[str, Any]]:
        for v in self._variants():
            if str(v.get(VK.ID)) == str(variant_id):
                return v
        return None

    def set_variant_field(self, variant_id: Any, name: str, value: Any) -> None:
        variant = self._find_variant(variant_id)
        if variant is None:
            raise KeyError(f"unknown variant {variant_id!r}")
        variant[name] = copy.deepcopy(value)
        self._changed(Section.VARIANTS)

    def merge_variant(self, variant_id: Any, values: Mapping[str, Any], *, notify: bool = True) -> None:
        variant = self._find_variant(variant_id)
        if variant is None:
            raise KeyError(f"unknown variant {variant_id!r}")
        variant.update(copy.deepcopy(dict(values or {})))
        if notify:
            self._changed(Section.VARIANTS)

    def replace_variants(self, variants: List[Mapping[str, Any]]) -> None:
        self._sections[Section.VARIANTS][K.VARIANTS] = copy.deepcopy([dict(v) for v in variants])
        self._changed(Section.VARIANTS)

    # --------- media ---------
    def _media(self, field: str, variant_id: Any = None) -> List[Dict[str, Any]]:
        if variant_id is not None:
            variant = self._find_variant(variant_id)
            if variant is None:
                raise KeyError(f"unknown variant {variant_id!r}")
            items = variant.get(VK.IMAGES)
            if not isinstance(items, list):
                items = []
                variant[VK.IMAGES] = items
            return items
        if field not in _MEDIA_FIELDS:
            raise KeyError(f"{field!r} is not a media field")
        items = self._sections[Section.MEDIA].get(field)
        if not isinstance(items, list):
            items = []
            self._sections[Section.MEDIA][field] = items
        return items

    @staticmethod
    def _media_index(items: List[Dict[str, Any]], ref: Any) -> int:
        for i, it in enumerate(items):
            if it.get(MK.ID) is not None and str(it.get(MK.ID)) == str(ref):
                return i
            if it.get(MK.LOCAL_KEY) is not None and it.get(MK.LOCAL_KEY) == ref:
                return i
        raise KeyError(f"unknown media item {ref!r}")

    def _media_section(self, variant_id: Any) -> Section:
        return Section.VARIANTS if variant_id is not None else Section.MEDIA

    def media(self, field: str = K.IMAGES, variant_id: Any = None) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._media(field, variant_id))

    def add_media(self, local_path: str, field: str = K.IMAGES, variant_id: Any = None) -> str:
        """Queue a local file for upload. Returns the local key of the pending item."""
        items = self._media(field, variant_id)
        local_key = uuid.uuid4().hex
        items.append({MK.ID: None, MK.LOCAL_KEY: local_key, MK.LOCAL_PATH: str(local_path), MK.IS_PRIMARY: False})
        self._changed(self._media_section(variant_id))
        return local_key

    def remove_media(self, ref: Any, field: str = K.IMAGES, variant_id: Any = None) -> None:
        items = self._media(field, variant_id)
        del items[self._media_index(items, ref)]
        self._changed(self._media_section(variant_id))

    def move_media(self, ref: Any, new_index: int, field: str = K.IMAGES, variant_id: Any = None) -> None:
        items = self._media(field, variant_id)
        item = items.pop(self._media_index(items, ref))
        new_index = max(0, min(int(new_index), len(items)))
        items.insert(new_index, item)
        self._changed(self._media_section(variant_id))

    def set_primary_media(self, ref: Any, field: str = K.IMAGES, variant_id: Any = None) -> None:
        items = self._media(field, variant_id)
        idx = self._media_index(items, ref)
        for i, it in enumerate(items):
            it[MK.IS_PRIMARY] = i == idx
        self._changed(self._media_section(variant_id))

    def resolve_pending_media(
        self,
        uploaded: Mapping[str, Mapping[str, Any]],
        failed: Mapping[str, str],
        field: str = K.IMAGES,
        variant_id: Any = None,
        *,
        notify: bool = True,
    ) -> None:
        """Swap uploaded pending items for their persisted form; tag failures."""
        items = self._media(field, variant_id)
        for i, it in enumerate(items):
            key = it.get(MK.LOCAL_KEY)
            if it.get(MK.ID) is not None or key is None:
                continue
            if key in uploaded:
                items[i] = copy.deepcopy(dict(uploaded[key]))
            elif key in failed:
                it[MK.ERROR] = str(failed[key])
        if notify:
            self._changed(self._media_section(variant_id))

    # --------- inventory ---------
    def _stocks(self) -> Dict[str, Any]:
        stocks = self._sections[Section.INVENTORY].get(K.WAREHOUSE_STOCKS)
        if not isinstance(stocks, dict):
            stocks = {}
            self._sections[Section.INVENTORY][K.WAREHOUSE_STOCKS] = stocks
        return stocks

    def stocks(self) -> Dict[str, Any]:
        return copy.deepcopy(self._stocks())

    def set_stock(self, warehouse_id: Any, quantity: Any, low_stock_threshold: Any = None, batches: Any = None) -> None:
        entry = {SK.QUANTITY: quantity, SK.LOW_STOCK_THRESHOLD: low_stock_threshold, SK.BATCHES: list(batches or [])}
        self._stocks()[str(warehouse_id)] = entry
        self._changed(Section.INVENTORY)

    def remove_stock(self, warehouse_id: Any) -> None:
        stocks = self._stocks()
        if str(warehouse_id) not in stocks:
            raise KeyError(f"warehouse {warehouse_id!r} is not assigned")
        del stocks[str(warehouse_id)]
        self._changed(Section.INVENTORY)
