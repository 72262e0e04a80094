# -*- coding: utf-8 -*-
"""Client-side checks run before a section is sent.

Each validator returns ``{field: message}`` for the fields that would be
rejected; an empty mapping means the section may be saved. Values are
checked in their normalized form, so "12,5" is a valid price and "12a" is
not a number at all.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from core.keys import ProductKeys as K
from core.keys import VariantKeys as VK
from core.sections import Section
from domain.product_schema import (
    FieldKind,
    VARIANT_FIELDS,
    is_unparsed,
    normalize_section,
    normalize_variant,
    section_fields,
)


def _numbers(specs, values: Mapping[str, Any], errors: Dict[str, str]) -> None:
    for spec in specs:
        if spec.kind in (FieldKind.NUMBER, FieldKind.INTEGER) and is_unparsed(values.get(spec.name)):
            whole = spec.kind == FieldKind.INTEGER
            errors[spec.name] = f"{spec.label} must be a {'whole number' if whole else 'number'}"


def _at_least(values: Mapping[str, Any], errors: Dict[str, str], name: str, low: float, message: str, *, required: bool = False) -> None:
    if name in errors:
        return
    value = values.get(name)
    if value is None:
        if required:
            errors[name] = message
        return
    if value < low:
        errors[name] = message


def validate_basic(values: Mapping[str, Any]) -> Dict[str, str]:
    v = normalize_section(Section.BASIC, values)
    errors: Dict[str, str] = {}
    _numbers(section_fields(Section.BASIC), v, errors)
    if not (v[K.NAME] or "").strip():
        errors[K.NAME] = "Product name is required"
    if not (v[K.SKU] or "").strip():
        errors[K.SKU] = "SKU is required"
    if v[K.CATEGORY_ID] is None:
        errors[K.CATEGORY_ID] = "Category is required"
    pct = v[K.SALE_PERCENTAGE]
    if K.SALE_PERCENTAGE not in errors and pct is not None and not 0 <= pct <= 100:
        errors[K.SALE_PERCENTAGE] = "Sale percentage must be between 0 and 100"
    return errors


def validate_pricing(values: Mapping[str, Any]) -> Dict[str, str]:
    v = normalize_section(Section.PRICING, values)
    errors: Dict[str, str] = {}
    _numbers(section_fields(Section.PRICING), v, errors)
    _at_least(v, errors, K.PRICE, 0.01, "Price must be greater than 0", required=True)
    _at_least(v, errors, K.COMPARE_AT_PRICE, 0.01, "Compare-at price must be greater than 0")
    _at_least(v, errors, K.COST_PRICE, 0.01, "Cost price must be greater than 0")
    return errors


def validate_details(values: Mapping[str, Any]) -> Dict[str, str]:
    v = normalize_section(Section.DETAILS, values)
    errors: Dict[str, str] = {}
    _numbers(section_fields(Section.DETAILS), v, errors)
    _at_least(v, errors, K.WEIGHT_KG, 0, "Weight cannot be negative")
    return errors


def validate_variant(variant: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    v = normalize_variant(variant or {})
    errors: Dict[str, str] = {}
    _numbers(VARIANT_FIELDS, v, errors)
    _at_least(v, errors, VK.PRICE, 0.01, "Price must be greater than 0")
    return errors


def validate_section(section: Section, values: Mapping[str, Any], item_id: Any = None) -> Dict[str, str]:
    """Field errors that block saving *section* (one variant when *item_id* is set)."""
    section = Section(section)
    if section == Section.BASIC:
        return validate_basic(values)
    if section == Section.PRICING:
        return validate_pricing(values)
    if section == Section.DETAILS:
        return validate_details(values)
    if section == Section.VARIANTS and item_id is not None:
        for variant in values.get(K.VARIANTS) or []:
            if str(variant.get(VK.ID)) == str(item_id):
                return validate_variant(variant)
    return {}
