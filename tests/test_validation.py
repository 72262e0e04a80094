# -*- coding: utf-8 -*-
"""Client-side field checks and how unparseable numbers normalize."""

from __future__ import annotations

from core.keys import ProductKeys as K
from core.sections import Section
from domain.product_schema import FieldKind, normalize_value, split_record
from domain.section_diff import compute_diff
from domain.validation import validate_section


def test_unparseable_numbers_stay_distinct() -> None:
    assert normalize_value(FieldKind.NUMBER, "12a") == "12a"
    assert normalize_value(FieldKind.NUMBER, " abc ") == "abc"
    assert normalize_value(FieldKind.NUMBER, "") is None
    assert normalize_value(FieldKind.NUMBER, "12,5") == 12.5
    assert normalize_value(FieldKind.INTEGER, "3.5") == "3.5"


def test_junk_is_never_sent_as_null(product) -> None:
    baseline = split_record(product)[Section.PRICING]

    diff = compute_diff(Section.PRICING, dict(baseline, price="12a"), baseline)

    assert diff == {K.PRICE: "12a"}


def test_loaded_product_passes(product) -> None:
    for section, values in split_record(product).items():
        assert validate_section(section, values) == {}
    assert validate_section(Section.VARIANTS, split_record(product)[Section.VARIANTS], 101) == {}


def test_basic_requires_name_sku_and_category(product) -> None:
    values = dict(split_record(product)[Section.BASIC], productName="  ", sku=None, categoryId="")

    assert validate_section(Section.BASIC, values) == {
        K.NAME: "Product name is required",
        K.SKU: "SKU is required",
        K.CATEGORY_ID: "Category is required",
    }


def test_sale_percentage_range(product) -> None:
    values = split_record(product)[Section.BASIC]

    assert validate_section(Section.BASIC, dict(values, salePercentage=100)) == {}
    assert validate_section(Section.BASIC, dict(values, salePercentage="-1")) == {
        K.SALE_PERCENTAGE: "Sale percentage must be between 0 and 100"
    }
    assert validate_section(Section.BASIC, dict(values, salePercentage="ten")) == {
        K.SALE_PERCENTAGE: "Sale % must be a number"
    }


def test_pricing_rules(product) -> None:
    values = split_record(product)[Section.PRICING]

    assert validate_section(Section.PRICING, dict(values, price=None)) == {K.PRICE: "Price must be greater than 0"}
    assert validate_section(Section.PRICING, dict(values, price="0")) == {K.PRICE: "Price must be greater than 0"}
    assert validate_section(Section.PRICING, dict(values, costPrice="")) == {}
    assert validate_section(Section.PRICING, dict(values, compareAtPrice="abc")) == {
        K.COMPARE_AT_PRICE: "Compare-at price must be a number"
    }


def test_weight_cannot_be_negative(product) -> None:
    values = split_record(product)[Section.DETAILS]

    assert validate_section(Section.DETAILS, dict(values, weightKg="0")) == {}
    assert validate_section(Section.DETAILS, dict(values, weightKg="-0,5")) == {K.WEIGHT_KG: "Weight cannot be negative"}


def test_variant_price_is_checked_per_item(product) -> None:
    values = split_record(product)[Section.VARIANTS]
    values[K.VARIANTS][1]["price"] = "12a"

    assert validate_section(Section.VARIANTS, values, 101) == {}
    assert validate_section(Section.VARIANTS, values, 102) == {"price": "Price must be a number"}
