# -*- coding: utf-8 -*-
"""Section keys (single source of truth).

Keep these constants stable. They are used by:
- the product schema (domain.product_schema)
- the dirty tracker (per-section baselines)
- the section save controller (save keys, endpoint routing)
- the location query parameter (``?tab=<section>``)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class Section(str, Enum):
    BASIC = "basic"
    PRICING = "pricing"
    MEDIA = "media"
    VARIANTS = "variants"
    INVENTORY = "inventory"
    DETAILS = "details"


# Tab order in the editor. The first entry is the default section.
SECTION_ORDER: Tuple[Section, ...] = (
    Section.BASIC,
    Section.PRICING,
    Section.MEDIA,
    Section.VARIANTS,
    Section.INVENTORY,
    Section.DETAILS,
)

DEFAULT_SECTION = SECTION_ORDER[0]

SECTION_TITLES = {
    Section.BASIC: "Basic info",
    Section.PRICING: "Pricing",
    Section.MEDIA: "Media",
    Section.VARIANTS: "Variants",
    Section.INVENTORY: "Inventory",
    Section.DETAILS: "Details / SEO",
}


def section_from_value(value: Any, default: Section = DEFAULT_SECTION) -> Section:
    """Coerce *value* to a Section, falling back to *default* when unknown."""
    if isinstance(value, Section):
        return value
    if value is None:
        return default
    try:
        return Section(str(value).strip().lower())
    except ValueError:
        return default
