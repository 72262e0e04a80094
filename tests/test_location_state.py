# -*- coding: utf-8 -*-
from __future__ import annotations

from core.sections import Section, section_from_value
from domain.location import location_with_section, section_from_location


def test_missing_tab_defaults_to_first_section() -> None:
    assert section_from_location("") == Section.BASIC
    assert section_from_location("/products/p1") == Section.BASIC
    assert section_from_location("/products/p1?page=2") == Section.BASIC


def test_tab_is_read_case_insensitively() -> None:
    assert section_from_location("/products/p1?tab=Inventory") == Section.INVENTORY


def test_unknown_tab_uses_default() -> None:
    assert section_from_location("?tab=reviews", default=Section.DETAILS) == Section.DETAILS


def test_writing_the_tab_keeps_other_parameters() -> None:
    url = location_with_section("https://admin.test/products/p1?shop=9&tab=basic#top", Section.MEDIA)
    assert url == "https://admin.test/products/p1?shop=9&tab=media#top"
    assert section_from_location(url) == Section.MEDIA


def test_section_from_value_accepts_members_and_none() -> None:
    assert section_from_value(Section.PRICING) == Section.PRICING
    assert section_from_value(None) == Section.BASIC
    assert section_from_value(" variants ") == Section.VARIANTS
