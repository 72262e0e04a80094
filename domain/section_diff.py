# -*- coding: utf-8 -*-
"""
domain/section_diff.py

Field-level deltas between the working copy and the baseline.

A section diff is a mapping ``field -> new value`` restricted to fields whose
normalized value differs from the baseline. It is computed fresh on every
save attempt and never stored.

Shapes per section:
- flat sections (basic, pricing, details): ``{field: value}``
- media: ``{"images": [persisted items in order], ...}`` (pending uploads are
  handled by the save controller, not by the diff)
- variants (one item): ``{variant field: value}``
- inventory: ``{"warehouseStocks": {warehouse_id: entry or None}}``, None
  meaning the warehouse was unassigned
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional

from core.keys import ProductKeys as K
from core.keys import VariantKeys as VK
from core.sections import SECTION_ORDER, Section
from core.types import SaveKey
from domain.product_schema import (
    FieldKind,
    VARIANT_FIELDS,
    normalize_section,
    normalize_variant,
    pending_media,
    persisted_media,
    section_fields,
)

_FLAT_KINDS = (FieldKind.TEXT, FieldKind.NUMBER, FieldKind.INTEGER, FieldKind.ID, FieldKind.BOOLEAN)

_VARIANT_SCALARS = tuple(spec.name for spec in VARIANT_FIELDS) + (VK.ATTRIBUTES,)


def _variants_by_id(values: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {str(v.get(VK.ID)): v for v in (values.get(K.VARIANTS) or [])}


def variant_diff(working_variant: Optional[Mapping[str, Any]], baseline_variant: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    w = normalize_variant(working_variant or {})
    b = normalize_variant(baseline_variant or {})
    diff = {name: w[name] for name in _VARIANT_SCALARS if w[name] != b[name]}
    w_images = persisted_media(w[VK.IMAGES])
    if w_images != persisted_media(b[VK.IMAGES]):
        diff[VK.IMAGES] = w_images
    return diff


def compute_diff(
    section: Section,
    working_values: Mapping[str, Any],
    baseline_values: Mapping[str, Any],
    item_id: Any = None,
) -> Dict[str, Any]:
    w = normalize_section(section, working_values)
    b = normalize_section(section, baseline_values)

    if section == Section.VARIANTS:
        w_by_id = _variants_by_id(w)
        b_by_id = _variants_by_id(b)
        if item_id is not None:
            return variant_diff(w_by_id.get(str(item_id)), b_by_id.get(str(item_id)))
        out: Dict[str, Any] = {}
        for vid, variant in w_by_id.items():
            d = variant_diff(variant, b_by_id.get(vid))
            if d:
                out[vid] = d
        return out

    diff: Dict[str, Any] = {}
    for spec in section_fields(section):
        name = spec.name
        if spec.kind in _FLAT_KINDS:
            if w[name] != b[name]:
                diff[name] = w[name]
        elif spec.kind == FieldKind.MEDIA_LIST:
            w_list = persisted_media(w[name])
            if w_list != persisted_media(b[name]):
                diff[name] = w_list
        elif spec.kind == FieldKind.STOCK_MAP:
            delta: Dict[str, Any] = {}
            for wid, entry in w[name].items():
                if b[name].get(wid) != entry:
                    delta[wid] = entry
            for wid in b[name]:
                if wid not in w[name]:
                    delta[wid] = None
            if delta:
                diff[name] = delta
    return diff


def apply_diff(
    section: Section,
    values: Mapping[str, Any],
    diff: Mapping[str, Any],
    item_id: Any = None,
) -> Dict[str, Any]:
    """Return normalized *values* with *diff* applied (input is not modified)."""
    out = normalize_section(section, values)
    if section == Section.VARIANTS:
        if item_id is None:
            for vid, vdiff in diff.items():
                out = apply_diff(section, out, vdiff, item_id=vid)
            return out
        for variant in out[K.VARIANTS]:
            if str(variant.get(VK.ID)) == str(item_id):
                variant.update(copy.deepcopy(dict(diff)))
        return normalize_section(section, out)

    for spec in section_fields(section):
        if spec.name not in diff:
            continue
        if spec.kind == FieldKind.STOCK_MAP:
            merged = dict(out[spec.name])
            for wid, entry in (diff[spec.name] or {}).items():
                if entry is None:
                    merged.pop(str(wid), None)
                else:
                    merged[str(wid)] = copy.deepcopy(entry)
            out[spec.name] = merged
        else:
            out[spec.name] = copy.deepcopy(diff[spec.name])
    return normalize_section(section, out)


def has_pending_uploads(section: Section, working_values: Mapping[str, Any], item_id: Any = None) -> bool:
    if section == Section.MEDIA:
        return any(pending_media(working_values.get(f)) for f in (K.IMAGES, K.VIDEOS))
    if section == Section.VARIANTS:
        for v in working_values.get(K.VARIANTS) or []:
            if item_id is not None and str(v.get(VK.ID)) != str(item_id):
                continue
            if pending_media(v.get(VK.IMAGES)):
                return True
    return False


def dirty_save_keys(working_sections: Mapping[Section, Mapping[str, Any]], baseline_sections: Mapping[Section, Mapping[str, Any]]) -> List[SaveKey]:
    """Every independently-saveable unit that currently has something to save."""
    keys: List[SaveKey] = []
    for section in SECTION_ORDER:
        w = working_sections.get(section, {})
        b = baseline_sections.get(section, {})
        if section == Section.VARIANTS:
            w_by_id = _variants_by_id(normalize_section(section, w))
            b_by_id = _variants_by_id(normalize_section(section, b))
            for vid, variant in w_by_id.items():
                if variant_diff(variant, b_by_id.get(vid)) or pending_media(variant.get(VK.IMAGES)):
                    keys.append(SaveKey(section, variant.get(VK.ID)))
            continue
        if compute_diff(section, w, b) or has_pending_uploads(section, w):
            keys.append(SaveKey(section))
    return keys
