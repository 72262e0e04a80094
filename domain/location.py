# -*- coding: utf-8 -*-
"""Active section <-> location query parameter (``?tab=<section>``).

The location is a convenience mirror, never authoritative: an absent or
unknown ``tab`` value falls back to the first section.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from core.sections import DEFAULT_SECTION, Section, section_from_value

TAB_PARAM = "tab"


def section_from_location(location: str, default: Section = DEFAULT_SECTION) -> Section:
    query = urlsplit(location or "").query
    for name, value in parse_qsl(query, keep_blank_values=True):
        if name == TAB_PARAM:
            return section_from_value(value, default)
    return default


def location_with_section(location: str, section: Any) -> str:
    """Return *location* with its ``tab`` parameter set to *section* (other params kept)."""
    parts = urlsplit(location or "")
    value = getattr(section, "value", section)
    params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != TAB_PARAM]
    params.append((TAB_PARAM, str(value)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))
