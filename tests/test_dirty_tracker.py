# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from app.dirty_tracker import DirtyTracker, capture_baseline, is_dirty
from core.keys import ProductKeys as K
from core.sections import Section
from domain.working_copy import WorkingCopy


def _tracked(product):
    working = WorkingCopy.from_record(product)
    flips = []
    tracker = DirtyTracker(on_change=flips.append)
    tracker.attach(working)
    tracker.capture_baseline(working)
    return working, tracker, flips


def test_clean_right_after_capture(product) -> None:
    working = WorkingCopy.from_record(product)
    baseline = capture_baseline(working)
    assert is_dirty(working, baseline) is False


def test_edit_then_revert_is_clean(product) -> None:
    working, tracker, flips = _tracked(product)

    working.set_field(Section.PRICING, K.PRICE, 12)
    assert tracker.is_dirty is True
    assert tracker.dirty_sections == [Section.PRICING]

    working.set_field(Section.PRICING, K.PRICE, 10)
    assert tracker.is_dirty is False
    assert flips == [True, False]


def test_form_strings_match_server_values(product) -> None:
    working, tracker, flips = _tracked(product)

    # What a text input hands back for untouched fields.
    working.set_field(Section.PRICING, K.PRICE, "10")
    working.set_field(Section.PRICING, K.COST_PRICE, "4,5")
    working.set_field(Section.BASIC, K.SHORT_DESCRIPTION, None)
    working.set_field(Section.BASIC, K.CATEGORY_ID, "3")

    assert tracker.is_dirty is False
    assert flips == []


def test_baseline_is_not_aliased_to_working_copy(product) -> None:
    working, tracker, _ = _tracked(product)
    working.set_primary_media(12)

    assert [img["isPrimary"] for img in tracker.baseline.section(Section.MEDIA)[K.IMAGES]] == [True, False]
    assert tracker.dirty_sections == [Section.MEDIA]


def test_reorder_is_a_change_but_upload_errors_are_not(product) -> None:
    working, tracker, _ = _tracked(product)

    working.move_media(12, 0)
    assert tracker.section_is_dirty(Section.MEDIA)
    working.move_media(12, 1)
    assert tracker.is_dirty is False

    images = working.media()
    images[0]["error"] = "stale"
    working.merge_section(Section.MEDIA, {K.IMAGES: images})
    assert tracker.is_dirty is False


def test_suspend_batches_recomputation(product) -> None:
    working, tracker, flips = _tracked(product)

    with tracker.suspend_tracking():
        working.set_field(Section.BASIC, K.NAME, "Floor Lamp")
        assert tracker.is_dirty is False
        working.set_field(Section.BASIC, K.NAME, "Desk Lamp")

    assert tracker.is_dirty is False
    assert flips == []


def test_rebaseline_section_only_touches_that_section(product) -> None:
    working, tracker, _ = _tracked(product)
    working.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    working.set_field(Section.PRICING, K.PRICE, 12)

    tracker.rebaseline_section(Section.PRICING, working.values(Section.PRICING))

    assert tracker.dirty_sections == [Section.BASIC]


def test_rebaseline_needs_a_baseline() -> None:
    tracker = DirtyTracker()
    with pytest.raises(RuntimeError):
        tracker.rebaseline_section(Section.BASIC, {})


def test_unknown_field_is_rejected(product) -> None:
    working = WorkingCopy.from_record(product)
    with pytest.raises(KeyError):
        working.set_field(Section.PRICING, "discount", 5)
