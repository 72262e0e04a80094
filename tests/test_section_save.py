# -*- coding: utf-8 -*-
"""Section save controller: per-section saves, re-baselining and failures."""

from __future__ import annotations

import pytest

from app.dirty_tracker import DirtyTracker
from app.events import EventBus, SectionSaved, SectionSaveFailed, SectionSaveStarted
from core.keys import ProductKeys as K
from core.sections import Section
from core.types import NotificationVariant, SaveKey
from domain.working_copy import WorkingCopy
from services.errors import TransientError, ValidationError
from services.notifications import RecordingNotifier
from services.section_save import SaveStatus, SectionSaveController
from services.tasks.runner_core import ImmediateRunner, QueuedRunner

BASIC = SaveKey(Section.BASIC)
PRICING = SaveKey(Section.PRICING)
MEDIA = SaveKey(Section.MEDIA)


class Harness:
    def __init__(self, client, product, runner=None) -> None:
        self.client = client
        self.working = WorkingCopy.from_record(product)
        self.tracker = DirtyTracker()
        self.tracker.attach(self.working)
        self.tracker.capture_baseline(self.working)
        self.notifier = RecordingNotifier()
        self.bus = EventBus()
        self.events = []
        for event_type in (SectionSaveStarted, SectionSaved, SectionSaveFailed):
            self.bus.subscribe(event_type, self.events.append)
        self.runner = runner or ImmediateRunner()
        self.saver = SectionSaveController(
            client, self.working, self.tracker, self.runner, notifier=self.notifier, bus=self.bus
        )
        self.results = []

    def save(self, key):
        return self.saver.save(key, self.results.append)


@pytest.fixture
def h(client, product):
    return Harness(client, product)


@pytest.fixture
def queued(client, product):
    return Harness(client, product, runner=QueuedRunner())


def test_nothing_to_save_makes_no_network_call(h) -> None:
    result = h.save(PRICING)

    assert result.status == SaveStatus.NOTHING_TO_SAVE
    assert result.ok is True
    assert h.client.patches == [] and h.client.uploads == []
    assert h.notifier.last.title == "No Changes"
    assert isinstance(h.events[-1], SectionSaved) and h.events[-1].nothing_to_save is True


def test_successful_save_sends_diff_and_rebaselines(h) -> None:
    h.working.set_field(Section.PRICING, K.PRICE, 12)

    assert h.save(PRICING) is None
    assert h.results[0].status == SaveStatus.SAVED
    assert h.client.patches == [("p1", "pricing", {"price": 12.0})]
    assert h.tracker.is_dirty is False
    assert h.notifier.last.title == "Pricing Updated"
    assert h.notifier.last.variant == NotificationVariant.SUCCESS
    assert [type(e) for e in h.events] == [SectionSaveStarted, SectionSaved]


def test_other_dirty_sections_stay_dirty(h) -> None:
    h.working.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    h.working.set_field(Section.PRICING, K.PRICE, 12)

    h.save(PRICING)

    assert h.tracker.is_dirty is True
    assert h.tracker.dirty_sections == [Section.BASIC]
    assert h.saver.dirty_keys() == [BASIC]


def test_server_normalized_values_land_in_working_copy(h) -> None:
    h.client.responses["basic-info"] = {"slug": "floor-lamp"}
    h.working.set_field(Section.BASIC, K.SLUG, "Floor Lamp!")

    h.save(BASIC)

    assert h.working.get(Section.BASIC, K.SLUG) == "floor-lamp"
    assert h.tracker.is_dirty is False


def test_edits_made_during_the_request_stay_dirty(queued) -> None:
    h = queued
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    h.save(PRICING)
    h.working.set_field(Section.PRICING, K.PRICE, 14)

    h.runner.drain()

    assert h.results[0].status == SaveStatus.SAVED
    assert h.working.get(Section.PRICING, K.PRICE) == 14
    assert h.tracker.baseline.section(Section.PRICING)[K.PRICE] == 12.0
    assert h.tracker.dirty_sections == [Section.PRICING]


def test_second_save_of_same_section_is_busy(queued) -> None:
    h = queued
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    assert h.save(PRICING) is None
    assert h.saver.is_saving(PRICING) is True

    busy = h.save(PRICING)

    assert busy.status == SaveStatus.BUSY
    assert h.runner.pending == 1
    h.runner.drain()
    assert len(h.client.patches) == 1
    assert h.saver.is_saving() is False


def test_saves_of_different_sections_resolve_in_any_order(queued) -> None:
    h = queued
    h.working.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    h.save(BASIC)
    h.save(PRICING)

    h.runner.run_last()
    assert h.tracker.dirty_sections == [Section.BASIC]
    h.runner.run_next()

    assert [path for _id, path, _diff in h.client.patches] == ["pricing", "basic-info"]
    assert h.tracker.is_dirty is False
    assert h.working.get(Section.BASIC, K.NAME) == "Floor Lamp"


def test_validation_failure_keeps_edits_and_exposes_field_errors(h) -> None:
    h.client.fail_next(ValidationError("Invalid price", field_errors={"price": "exceeds the allowed maximum"}))
    h.working.set_field(Section.PRICING, K.PRICE, 99999)

    h.save(PRICING)

    result = h.results[0]
    assert result.status == SaveStatus.FAILED
    assert isinstance(result.error, ValidationError)
    assert h.tracker.dirty_sections == [Section.PRICING]
    assert h.working.get(Section.PRICING, K.PRICE) == 99999
    assert h.saver.field_errors(PRICING) == {"price": "exceeds the allowed maximum"}
    assert h.notifier.last.variant == NotificationVariant.DESTRUCTIVE
    assert h.notifier.last.title == "Validation failed"
    assert isinstance(h.events[-1], SectionSaveFailed)


def test_retry_after_transient_failure_clears_field_errors(h) -> None:
    h.client.fail_next(ValidationError("Invalid price", field_errors={"price": "exceeds the allowed maximum"}))
    h.working.set_field(Section.PRICING, K.PRICE, 99999)
    h.save(PRICING)

    h.client.fail_next(TransientError("Service unavailable", status=503))
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    h.save(PRICING)
    assert h.notifier.last.title == "Connection problem"
    assert h.tracker.is_dirty is True

    h.save(PRICING)
    assert h.results[-1].status == SaveStatus.SAVED
    assert h.saver.field_errors(PRICING) == {}
    assert len(h.notifier.sent) == 3


def test_variants_are_saved_one_item_at_a_time(h) -> None:
    h.working.set_variant_field(102, "price", "12.5")

    with pytest.raises(ValueError):
        h.save(SaveKey(Section.VARIANTS))

    h.save(SaveKey(Section.VARIANTS, 102))
    assert h.client.patches == [("p1", "variants/102", {"price": 12.5})]
    assert h.tracker.is_dirty is False


def test_upload_only_save_skips_the_partial_update(h) -> None:
    local_key = h.working.add_media("/tmp/new.jpg")

    h.save(MEDIA)

    assert h.client.uploads == [("p1", "media/images", [(local_key, "/tmp/new.jpg")])]
    assert h.client.patches == []
    images = h.working.media(K.IMAGES)
    assert images[-1]["id"] == 1000
    assert "localKey" not in images[-1]
    assert h.tracker.is_dirty is False


def test_pending_primary_flag_is_sent_after_upload(h) -> None:
    local_key = h.working.add_media("/tmp/new.jpg")
    h.working.set_primary_media(local_key)

    h.save(MEDIA)

    assert len(h.client.patches) == 1
    _id, path, diff = h.client.patches[0]
    assert path == "media"
    assert [(img["id"], img["isPrimary"]) for img in diff[K.IMAGES]] == [(11, False), (12, False), (1000, True)]
    assert h.tracker.is_dirty is False


def test_partial_upload_failure_keeps_uploaded_items(h) -> None:
    h.client.failing_paths.add("/tmp/huge.jpg")
    for path in ("/tmp/one.jpg", "/tmp/two.jpg", "/tmp/huge.jpg"):
        h.working.add_media(path)

    h.save(MEDIA)

    assert h.results[0].status == SaveStatus.FAILED
    assert h.client.patches == []
    images = h.working.media(K.IMAGES)
    assert [img["id"] for img in images] == [11, 12, 1000, 1001, None]
    assert images[-1]["error"] == "File is too large"
    assert [img["id"] for img in h.tracker.baseline.section(Section.MEDIA)[K.IMAGES]] == [11, 12, 1000, 1001]
    assert h.tracker.dirty_sections == [Section.MEDIA]
    assert h.notifier.last.title == "Some uploads failed"

    # Retrying only sends the file that failed.
    h.client.failing_paths.clear()
    h.save(MEDIA)

    assert [len(files) for _id, _path, files in h.client.uploads] == [3, 1]
    assert h.results[-1].status == SaveStatus.SAVED
    assert h.tracker.is_dirty is False


def test_save_all_dirty_waits_for_in_flight_saves(queued) -> None:
    h = queued
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    h.working.set_variant_field(101, "isActive", False)
    h.save(PRICING)
    collected = []

    h.saver.save_all_dirty(collected.append)

    assert h.runner.pending == 2
    h.runner.drain()
    assert len(collected) == 1
    assert sorted(r.key.label() for r in collected[0]) == ["pricing", "variants[101]"]
    assert all(r.status == SaveStatus.SAVED for r in collected[0])
    assert h.tracker.is_dirty is False


def test_save_all_dirty_with_nothing_dirty(h) -> None:
    collected = []
    h.saver.save_all_dirty(collected.append)
    assert collected == [[]]


def test_results_after_dispose_are_discarded(queued) -> None:
    h = queued
    h.working.set_field(Section.PRICING, K.PRICE, 12)
    h.save(PRICING)

    h.saver.dispose()
    assert [r.status for r in h.results] == [SaveStatus.FAILED]
    h.runner.drain()

    assert len(h.results) == 1
    assert h.tracker.is_dirty is True
    assert h.notifier.sent == []
