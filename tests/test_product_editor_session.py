# -*- coding: utf-8 -*-
"""End-to-end editor journeys against the in-memory client."""

from __future__ import annotations

import pytest

from app.events import DirtyChanged
from core.keys import ProductKeys as K
from core.sections import Section
from services.errors import ConflictError, NotFoundError
from services.navigation_guard import GuardChoice, ReloadRecord
from services.notifications import RecordingNotifier
from services.product_editor import ProductEditorSession
from services.tasks.runner_core import QueuedRunner


class Calls:
    def __init__(self) -> None:
        self.back = 0
        self.exit = 0
        self.locations = []


def _session(client, *, location="", runner=None, load=True):
    calls = Calls()
    notifier = RecordingNotifier()

    def _back():
        calls.back += 1

    def _exit():
        calls.exit += 1

    session = ProductEditorSession(
        client,
        "p1",
        runner=runner,
        notifier=notifier,
        location=location,
        on_back=_back,
        on_exit=_exit,
        on_location_changed=calls.locations.append,
    )
    if load:
        session.load()
    return session, notifier, calls


def test_edit_price_and_save_pricing(client) -> None:
    session, notifier, _ = _session(client)

    session.set_field(Section.PRICING, K.PRICE, 12)
    assert session.is_dirty is True

    session.save_section(Section.PRICING)

    assert client.patches == [("p1", "pricing", {"price": 12.0})]
    assert session.is_dirty is False
    assert notifier.last.title == "Pricing Updated"


def test_edit_and_revert_needs_no_save(client) -> None:
    session, _, _ = _session(client)

    session.set_field(Section.PRICING, K.PRICE, 12)
    session.set_field(Section.PRICING, K.PRICE, 10)

    assert session.is_dirty is False
    assert client.patches == []


def test_saving_one_of_two_dirty_sections(client) -> None:
    session, _, _ = _session(client)
    session.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    session.set_field(Section.PRICING, K.PRICE, 12)

    session.save_section(Section.PRICING)

    assert session.is_dirty is True
    assert session.dirty_sections == [Section.BASIC]


def test_discard_on_tab_switch_keeps_values_as_new_baseline(client) -> None:
    session, _, calls = _session(client)
    session.set_field(Section.PRICING, K.PRICE, -5)

    assert session.switch_section(Section.MEDIA) is False
    assert session.active_section == Section.BASIC

    session.choose_discard()

    assert session.is_dirty is False
    assert session.working.get(Section.PRICING, K.PRICE) == -5
    assert session.tracker.baseline.section(Section.PRICING)[K.PRICE] == -5.0
    assert session.active_section == Section.MEDIA
    assert calls.locations == ["?tab=media"]
    assert client.patches == []


def test_partial_upload_failure_keeps_media_dirty(client) -> None:
    session, notifier, _ = _session(client)
    client.failing_paths.add("/photos/oversized.jpg")
    for path in ("/photos/front.jpg", "/photos/side.jpg", "/photos/oversized.jpg"):
        session.add_image(path)

    session.save_section(Section.MEDIA)

    images = session.working.media(K.IMAGES)
    assert [img["id"] for img in images[2:]] == [1000, 1001, None]
    assert images[-1]["error"] == "File is too large"
    assert session.dirty_sections == [Section.MEDIA]
    assert len([n for n in notifier.sent if n.title == "Some uploads failed"]) == 1


def test_guard_save_then_switch(client) -> None:
    session, _, _ = _session(client)
    session.set_field(Section.PRICING, K.PRICE, 12)
    session.switch_section(Section.VARIANTS)
    assert session.guard.intercepted is True

    session.choose_save()

    assert session.active_section == Section.VARIANTS
    assert session.is_dirty is False
    assert client.patches == [("p1", "pricing", {"price": 12.0})]


def test_guard_cancel_stays_put(client) -> None:
    session, _, _ = _session(client)
    session.set_field(Section.PRICING, K.PRICE, 12)
    session.switch_section(Section.VARIANTS)

    session.choose_cancel()

    assert session.active_section == Section.BASIC
    assert session.is_dirty is True
    assert session.guard.intercepted is False


def test_guard_save_failure_keeps_dialog_pending(client) -> None:
    session, _, calls = _session(client)
    session.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    client.fail_next(ConflictError("Product was modified by someone else", status=409))
    session.go_back()

    session.choose_save()

    # The conflict replaces "go back" with a guarded reload.
    assert calls.back == 0
    assert session.guard.pending_intent == ReloadRecord()
    assert session.guard.allowed_choices() == (GuardChoice.DISCARD, GuardChoice.CANCEL)


def test_conflict_offers_guarded_reload(client) -> None:
    session, notifier, _ = _session(client)
    session.set_field(Section.PRICING, K.PRICE, 12)
    client.fail_next(ConflictError("Product was modified by someone else", status=409))

    session.save_section(Section.PRICING)

    assert notifier.last.title == "Record changed on the server"
    assert session.guard.pending_intent == ReloadRecord()
    assert client.fetches == ["p1"]

    session.choose_discard()

    assert client.fetches == ["p1", "p1"]
    assert session.working.get(Section.PRICING, K.PRICE) == 10
    assert session.is_dirty is False


def test_missing_record_on_load_exits_editor(client) -> None:
    del client.records["p1"]

    session, notifier, calls = _session(client)

    assert session.loaded is False
    assert calls.exit == 1
    assert notifier.last.title == "Failed to load product"


def test_missing_record_on_save_exits_editor(client) -> None:
    session, _, calls = _session(client)
    session.set_field(Section.DETAILS, K.META_TITLE, "Lamp")
    client.fail_next(NotFoundError("Product p1 not found", status=404))

    session.save_section(Section.DETAILS)

    assert calls.exit == 1


def test_active_section_comes_from_location(client) -> None:
    session, _, calls = _session(client, location="/products/p1?mode=edit&tab=variants")
    assert session.active_section == Section.VARIANTS

    assert session.switch_section(Section.PRICING) is True

    assert session.active_section == Section.PRICING
    assert calls.locations == ["/products/p1?mode=edit&tab=pricing"]


def test_unknown_tab_falls_back_to_first_section(client) -> None:
    session, _, _ = _session(client, location="?tab=reviews")
    assert session.active_section == Section.BASIC


def test_back_when_clean(client) -> None:
    session, _, calls = _session(client)
    assert session.go_back() is True
    assert calls.back == 1


def test_dirty_changed_events(client) -> None:
    session, _, _ = _session(client)
    events = []
    session.bus.subscribe(DirtyChanged, events.append)

    session.set_field(Section.PRICING, K.PRICE, 12)
    session.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    session.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    session.set_field(Section.BASIC, K.NAME, "Desk Lamp")
    session.set_field(Section.PRICING, K.PRICE, 10)

    assert events == [
        DirtyChanged(True, (Section.PRICING,)),
        DirtyChanged(True, (Section.BASIC, Section.PRICING)),
        DirtyChanged(True, (Section.PRICING,)),
        DirtyChanged(False, ()),
    ]


def test_stale_load_result_is_ignored(client) -> None:
    runner = QueuedRunner()
    session, _, _ = _session(client, runner=runner, load=False)
    session.load()
    session.load()

    runner.run_next()
    assert session.loaded is False
    runner.run_next()
    assert session.loaded is True


def test_close_discards_in_flight_saves(client) -> None:
    runner = QueuedRunner()
    session, notifier, _ = _session(client, runner=runner, load=False)
    session.load()
    runner.drain()
    session.set_field(Section.PRICING, K.PRICE, 12)
    session.save_section(Section.PRICING)
    assert session.is_saving(Section.PRICING) is True

    session.close()
    runner.drain()

    assert notifier.sent == []
    assert session.is_dirty is True


def test_edits_before_load_are_rejected(client) -> None:
    session, _, _ = _session(client, load=False)
    with pytest.raises(RuntimeError):
        session.set_field(Section.PRICING, K.PRICE, 12)


def test_inventory_edits(client) -> None:
    session, _, _ = _session(client)
    session.set_stock("w2", "3", 1)
    session.remove_stock("w1")

    session.save_section(Section.INVENTORY)

    assert client.patches == [
        ("p1", "inventory", {K.WAREHOUSE_STOCKS: {"w2": {"quantity": 3, "lowStockThreshold": 1, "batches": []}, "w1": None}})
    ]
    assert session.is_dirty is False


def test_unparseable_price_blocks_the_save(client) -> None:
    session, notifier, _ = _session(client)

    session.set_field(Section.PRICING, K.PRICE, "12a")
    assert session.is_dirty is True

    result = session.save_section(Section.PRICING)

    assert result.ok is False
    assert client.patches == []
    assert session.working.get(Section.PRICING, K.PRICE) == "12a"
    assert session.field_errors(Section.PRICING) == {K.PRICE: "Price must be a number"}
    assert notifier.last.title == "Validation failed"
    assert session.is_dirty is True


def test_junk_in_an_empty_number_field_is_an_edit(client) -> None:
    session, _, _ = _session(client)

    session.set_field(Section.PRICING, K.COMPARE_AT_PRICE, "abc")

    assert session.is_dirty is True
    assert session.dirty_sections == [Section.PRICING]


def test_fixing_the_field_clears_its_error(client) -> None:
    session, _, _ = _session(client)
    session.set_field(Section.BASIC, K.SALE_PERCENTAGE, 150)
    session.save_section(Section.BASIC)
    assert K.SALE_PERCENTAGE in session.field_errors(Section.BASIC)

    session.set_field(Section.BASIC, K.SALE_PERCENTAGE, "15")
    session.save_section(Section.BASIC)

    assert client.patches == [("p1", "basic-info", {K.SALE_PERCENTAGE: 15.0})]
    assert session.field_errors(Section.BASIC) == {}


def test_reload_during_guarded_save_releases_the_guard(client) -> None:
    runner = QueuedRunner()
    session, _, _ = _session(client, runner=runner, load=False)
    session.load()
    runner.drain()
    session.set_field(Section.BASIC, K.NAME, "Floor Lamp")
    session.set_field(Section.PRICING, K.PRICE, 12)
    session.switch_section(Section.DETAILS)
    client.fail_next(ConflictError("Product was modified by someone else", status=409))

    session.choose_save()
    assert runner.pending == 2
    runner.run_next()  # basic-info answers with a conflict
    assert session.guard.pending_intent == ReloadRecord()

    session.choose_discard()
    runner.run_last()  # the reload lands before the pricing save
    runner.drain()

    assert session.is_dirty is False
    assert session.guard.saving is False
    assert session.switch_section(Section.DETAILS) is True
    assert session.active_section == Section.DETAILS
