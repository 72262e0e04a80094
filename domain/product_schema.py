# -*- coding: utf-8 -*-
"""
domain/product_schema.py

Declarative schema of the editable product record, grouped by section.

Every comparison (dirty tracking, section diff) goes through
``normalize_section`` so that the working copy and the baseline are always
compared in the same canonical shape:
- text: "" and None are the same value (None)
- numbers: blank -> None, numeric strings parsed, decimal comma tolerated;
  text that does not parse is kept as typed (stripped), so it is never equal
  to a blank or saved number and the save-time checks can reject it
- ids: numeric strings become ints
- booleans: None -> False
- media lists: only persisted identity/order/primary flags (plus the local
  path of pending uploads); transient UI state such as ``error`` is dropped
- stock maps: keys coerced to str
Keys that are not in the schema are ignored.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.keys import MediaKeys as MK
from core.keys import ProductKeys as K
from core.keys import StockKeys as SK
from core.keys import VariantKeys as VK
from core.sections import Section
from domain.parse import is_blank, to_bool, to_float, to_int, to_text


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    ID = "id"
    BOOLEAN = "boolean"
    MEDIA_LIST = "media_list"
    VARIANT_LIST = "variant_list"
    STOCK_MAP = "stock_map"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind
    label: str = ""


def _f(name: str, kind: FieldKind, label: str = "") -> FieldSpec:
    return FieldSpec(name=name, kind=kind, label=label or name)


PRODUCT_SCHEMA: Dict[Section, Tuple[FieldSpec, ...]] = {
    Section.BASIC: (
        _f(K.NAME, FieldKind.TEXT, "Name"),
        _f(K.SHORT_DESCRIPTION, FieldKind.TEXT, "Short description"),
        _f(K.DESCRIPTION, FieldKind.TEXT, "Description"),
        _f(K.SKU, FieldKind.TEXT, "SKU"),
        _f(K.BARCODE, FieldKind.TEXT, "Barcode"),
        _f(K.MODEL, FieldKind.TEXT, "Model"),
        _f(K.SLUG, FieldKind.TEXT, "Slug"),
        _f(K.MATERIAL, FieldKind.TEXT, "Material"),
        _f(K.WARRANTY, FieldKind.TEXT, "Warranty"),
        _f(K.CARE_INSTRUCTIONS, FieldKind.TEXT, "Care instructions"),
        _f(K.CATEGORY_ID, FieldKind.ID, "Category"),
        _f(K.BRAND_ID, FieldKind.ID, "Brand"),
        _f(K.ACTIVE, FieldKind.BOOLEAN, "Active"),
        _f(K.FEATURED, FieldKind.BOOLEAN, "Featured"),
        _f(K.BESTSELLER, FieldKind.BOOLEAN, "Bestseller"),
        _f(K.NEW_ARRIVAL, FieldKind.BOOLEAN, "New arrival"),
        _f(K.ON_SALE, FieldKind.BOOLEAN, "On sale"),
        _f(K.SALE_PERCENTAGE, FieldKind.NUMBER, "Sale %"),
    ),
    Section.PRICING: (
        _f(K.PRICE, FieldKind.NUMBER, "Price"),
        _f(K.COMPARE_AT_PRICE, FieldKind.NUMBER, "Compare-at price"),
        _f(K.COST_PRICE, FieldKind.NUMBER, "Cost price"),
    ),
    Section.MEDIA: (
        _f(K.IMAGES, FieldKind.MEDIA_LIST, "Images"),
        _f(K.VIDEOS, FieldKind.MEDIA_LIST, "Videos"),
    ),
    Section.VARIANTS: (
        _f(K.VARIANTS, FieldKind.VARIANT_LIST, "Variants"),
    ),
    Section.INVENTORY: (
        _f(K.WAREHOUSE_STOCKS, FieldKind.STOCK_MAP, "Warehouse stock"),
    ),
    Section.DETAILS: (
        _f(K.META_TITLE, FieldKind.TEXT, "Meta title"),
        _f(K.META_DESCRIPTION, FieldKind.TEXT, "Meta description"),
        _f(K.META_KEYWORDS, FieldKind.TEXT, "Meta keywords"),
        _f(K.SEARCH_KEYWORDS, FieldKind.TEXT, "Search keywords"),
        _f(K.DIMENSIONS_CM, FieldKind.TEXT, "Dimensions (cm)"),
        _f(K.WEIGHT_KG, FieldKind.NUMBER, "Weight (kg)"),
    ),
}

# Per-variant scalar fields (images are handled as a media list).
VARIANT_FIELDS: Tuple[FieldSpec, ...] = (
    _f(VK.SKU, FieldKind.TEXT, "SKU"),
    _f(VK.PRICE, FieldKind.NUMBER, "Price"),
    _f(VK.COMPARE_AT_PRICE, FieldKind.NUMBER, "Compare-at price"),
    _f(VK.COST_PRICE, FieldKind.NUMBER, "Cost price"),
    _f(VK.IS_ACTIVE, FieldKind.BOOLEAN, "Active"),
)


def section_fields(section: Section) -> Tuple[FieldSpec, ...]:
    return PRODUCT_SCHEMA.get(section, ())


def field_spec(section: Section, name: str) -> Optional[FieldSpec]:
    for spec in section_fields(section):
        if spec.name == name:
            return spec
    return None


# ---------------------------------------------------------------------------
# normalization
# ---------------------------------------------------------------------------

def _norm_id(value: Any) -> Any:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    as_int = to_int(value)
    return as_int if as_int is not None else str(value)


def normalize_media_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Comparable view of one media item.

    Persisted items compare by id/url/primary/order. Pending items (id None)
    compare by their local path, so a pending upload is always a change.
    """
    item = item or {}
    media_id = _norm_id(item.get(MK.ID))
    if media_id is None:
        return {MK.ID: None, MK.LOCAL_PATH: to_text(item.get(MK.LOCAL_PATH))}
    return {
        MK.ID: media_id,
        MK.URL: to_text(item.get(MK.URL)),
        MK.IS_PRIMARY: to_bool(item.get(MK.IS_PRIMARY)),
    }


def normalize_media_list(items: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    # Order is significant: a reordered list is a change.
    return [normalize_media_item(it) for it in (items or [])]


def persisted_media(items: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    return [normalize_media_item(it) for it in (items or []) if _norm_id((it or {}).get(MK.ID)) is not None]


def pending_media(items: Optional[Iterable[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    return [dict(it) for it in (items or []) if _norm_id((it or {}).get(MK.ID)) is None]


def _normalize_attributes(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): to_text(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [copy.deepcopy(v) for v in value]
    return None


def normalize_variant(variant: Mapping[str, Any]) -> Dict[str, Any]:
    variant = variant or {}
    out: Dict[str, Any] = {VK.ID: _norm_id(variant.get(VK.ID))}
    for spec in VARIANT_FIELDS:
        out[spec.name] = normalize_value(spec.kind, variant.get(spec.name))
    out[VK.ATTRIBUTES] = _normalize_attributes(variant.get(VK.ATTRIBUTES))
    out[VK.IMAGES] = normalize_media_list(variant.get(VK.IMAGES))
    return out


def normalize_stock_entry(entry: Any) -> Dict[str, Any]:
    if not isinstance(entry, Mapping):
        entry = {SK.QUANTITY: entry}
    return {
        SK.QUANTITY: to_int(entry.get(SK.QUANTITY), default=0),
        SK.LOW_STOCK_THRESHOLD: to_int(entry.get(SK.LOW_STOCK_THRESHOLD)),
        SK.BATCHES: copy.deepcopy(list(entry.get(SK.BATCHES) or [])),
    }


def normalize_stock_map(value: Any) -> Dict[str, Dict[str, Any]]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): normalize_stock_entry(v) for k, v in value.items()}


def _norm_number(value: Any, parse) -> Any:
    if is_blank(value) or isinstance(value, bool):
        return None
    parsed = parse(value)
    return parsed if parsed is not None else str(value).strip()


def is_unparsed(value: Any) -> bool:
    """True for a normalized number that is still the raw text the user typed."""
    return isinstance(value, str)


def normalize_value(kind: FieldKind, value: Any) -> Any:
    if kind == FieldKind.TEXT:
        return to_text(value)
    if kind == FieldKind.NUMBER:
        return _norm_number(value, to_float)
    if kind == FieldKind.INTEGER:
        return _norm_number(value, to_int)
    if kind == FieldKind.ID:
        return _norm_id(value)
    if kind == FieldKind.BOOLEAN:
        return to_bool(value)
    if kind == FieldKind.MEDIA_LIST:
        return normalize_media_list(value)
    if kind == FieldKind.VARIANT_LIST:
        return [normalize_variant(v) for v in (value or [])]
    if kind == FieldKind.STOCK_MAP:
        return normalize_stock_map(value)
    raise ValueError(f"Unknown field kind: {kind!r}")


def normalize_section(section: Section, values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Canonical, schema-restricted view of one section's values."""
    values = values or {}
    return {spec.name: normalize_value(spec.kind, values.get(spec.name)) for spec in section_fields(section)}


def split_record(record: Mapping[str, Any]) -> Dict[Section, Dict[str, Any]]:
    """Split a flat API record into per-section raw values (deep-copied)."""
    record = record or {}
    out: Dict[Section, Dict[str, Any]] = {}
    for section, specs in PRODUCT_SCHEMA.items():
        out[section] = {spec.name: copy.deepcopy(record.get(spec.name)) for spec in specs}
    return out
