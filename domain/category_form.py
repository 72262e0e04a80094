# -*- coding: utf-8 -*-
"""Category edit form: field list and the update payload built from it."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple

from domain.parse import is_blank, to_bool, to_int, to_text

# (key, label, kind)
CATEGORY_FORM_FIELDS: Tuple[Tuple[str, str, str], ...] = (
    ("name", "Name", "text"),
    ("description", "Description", "text"),
    ("sortOrder", "Sort order", "integer"),
    ("isActive", "Active", "boolean"),
    ("isFeatured", "Featured", "boolean"),
    ("metaTitle", "Meta title", "text"),
    ("metaDescription", "Meta description", "text"),
    ("metaKeywords", "Meta keywords", "text"),
)


def form_values(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Initial form values for *record*; a missing active flag means active."""
    values = {key: record.get(key) for key, _label, _kind in CATEGORY_FORM_FIELDS}
    if values["isActive"] is None:
        values["isActive"] = True
    return values


def category_update(record: Mapping[str, Any], values: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Build the update payload for *record* from the edited *values*.

    Returns ``(payload, errors)``; the payload must not be sent when
    ``errors`` is not empty. Fields left out of *values* keep the record's
    value. Empty optional text is left out of the payload, and the parent
    is always sent so the category never moves.
    """
    merged = form_values(record)
    merged.update({k: v for k, v in values.items() if k in merged})
    errors: Dict[str, str] = {}

    name = (to_text(merged["name"]) or "").strip()
    if not name:
        errors["name"] = "Category name is required"

    sort_order = None
    if not is_blank(merged["sortOrder"]):
        sort_order = to_int(merged["sortOrder"])
        if sort_order is None:
            errors["sortOrder"] = "Sort order must be a whole number"

    payload: Dict[str, Any] = {"name": name, "parentId": record.get("parentId")}
    for key, _label, kind in CATEGORY_FORM_FIELDS:
        if key in ("name", "sortOrder"):
            continue
        if kind == "boolean":
            payload[key] = to_bool(merged[key])
        else:
            text = to_text(merged[key])
            if text is not None and text.strip():
                payload[key] = text
    if sort_order is not None:
        payload["sortOrder"] = sort_order
    return payload, errors
