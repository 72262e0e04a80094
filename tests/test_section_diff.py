# -*- coding: utf-8 -*-
"""Section diffs contain exactly the changed fields."""

from __future__ import annotations

import copy

from core.keys import ProductKeys as K
from core.sections import Section
from core.types import SaveKey
from domain.product_schema import split_record
from domain.section_diff import apply_diff, compute_diff, dirty_save_keys, has_pending_uploads


def test_flat_diff_has_only_changed_fields(product) -> None:
    baseline = split_record(product)[Section.BASIC]
    working = dict(baseline, productName="Desk Lamp 2", shortDescription=None, categoryId="3")

    assert compute_diff(Section.BASIC, working, baseline) == {"productName": "Desk Lamp 2"}


def test_every_changed_field_is_reported(product) -> None:
    baseline = split_record(product)[Section.PRICING]
    working = dict(baseline, price="12", compareAtPrice="15,5", costPrice="")

    assert compute_diff(Section.PRICING, working, baseline) == {
        "price": 12.0,
        "compareAtPrice": 15.5,
        "costPrice": None,
    }


def test_unchanged_section_has_empty_diff(product) -> None:
    sections = split_record(product)
    for section, values in sections.items():
        assert compute_diff(section, copy.deepcopy(values), values) == {}


def test_media_diff_sends_persisted_order_only(product) -> None:
    baseline = split_record(product)[Section.MEDIA]
    working = copy.deepcopy(baseline)
    working[K.IMAGES].reverse()
    working[K.IMAGES].append({"id": None, "localKey": "k1", "localPath": "/tmp/new.jpg"})

    diff = compute_diff(Section.MEDIA, working, baseline)

    assert list(diff) == [K.IMAGES]
    assert [img["id"] for img in diff[K.IMAGES]] == [12, 11]
    assert has_pending_uploads(Section.MEDIA, working) is True


def test_pending_upload_alone_is_not_part_of_the_diff(product) -> None:
    baseline = split_record(product)[Section.MEDIA]
    working = copy.deepcopy(baseline)
    working[K.IMAGES].append({"id": None, "localKey": "k1", "localPath": "/tmp/new.jpg"})

    assert compute_diff(Section.MEDIA, working, baseline) == {}
    assert has_pending_uploads(Section.MEDIA, working) is True


def test_stock_diff_marks_unassigned_warehouses(product) -> None:
    baseline = {K.WAREHOUSE_STOCKS: {"w1": {"quantity": 5, "lowStockThreshold": 2}, "w2": {"quantity": 1}}}
    working = {K.WAREHOUSE_STOCKS: {"w1": {"quantity": "7", "lowStockThreshold": 2}}}

    diff = compute_diff(Section.INVENTORY, working, baseline)

    assert diff == {
        K.WAREHOUSE_STOCKS: {
            "w1": {"quantity": 7, "lowStockThreshold": 2, "batches": []},
            "w2": None,
        }
    }
    applied = apply_diff(Section.INVENTORY, baseline, diff)
    assert applied == {K.WAREHOUSE_STOCKS: {"w1": {"quantity": 7, "lowStockThreshold": 2, "batches": []}}}


def test_variant_diff_is_per_item(product) -> None:
    baseline = split_record(product)[Section.VARIANTS]
    working = copy.deepcopy(baseline)
    working[K.VARIANTS][0]["price"] = "12"
    working[K.VARIANTS][1]["attributes"] = {"color": "navy"}

    assert compute_diff(Section.VARIANTS, working, baseline, item_id=101) == {"price": 12.0}
    assert compute_diff(Section.VARIANTS, working, baseline, item_id="102") == {"attributes": {"color": "navy"}}
    assert set(compute_diff(Section.VARIANTS, working, baseline)) == {"101", "102"}


def test_dirty_save_keys_split_variants(product) -> None:
    baseline = split_record(product)
    working = copy.deepcopy(baseline)
    working[Section.VARIANTS][K.VARIANTS][1]["isActive"] = False
    working[Section.MEDIA][K.VIDEOS] = [{"id": None, "localKey": "v1", "localPath": "/tmp/clip.mp4"}]

    assert dirty_save_keys(working, baseline) == [SaveKey(Section.MEDIA), SaveKey(Section.VARIANTS, 102)]
