# -*- coding: utf-8 -*-
"""Section save controller (pure, no UI dependencies).

One save runs in three steps:

1. ``prepare`` (UI thread): snapshot the section, compute the diff and the
   pending uploads. An empty diff with nothing to upload finishes right here
   as NOTHING_TO_SAVE, without any network call.
2. ``execute`` (worker): upload pending files one by one, then send the
   remaining diff as one partial update. Only snapshots are touched here.
3. ``apply`` (UI thread): merge the server response into the working copy
   and re-baseline the saved section.

Re-baselining is per section: the new baseline of the saved section is the
old baseline plus what was actually sent plus what the server answered.
Other sections keep their baselines, so they stay dirty, and edits made
while the request was in flight stay dirty too. Saves of different sections
may therefore resolve in any order.

Saves of the same ``SaveKey`` are serialized: a second ``save`` while the
first is in flight is refused with BUSY; ``save_all_dirty`` waits on the
in-flight save instead.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from app.dirty_tracker import DirtyTracker
from app.events import EventBus, SectionSaved, SectionSaveFailed, SectionSaveStarted
from core.keys import MediaKeys as MK
from core.keys import ProductKeys as K
from core.keys import VariantKeys as VK
from core.sections import SECTION_ORDER, SECTION_TITLES, Section
from core.types import SaveKey
from domain.product_schema import (
    FieldKind,
    VARIANT_FIELDS,
    normalize_section,
    normalize_value,
    pending_media,
    section_fields,
)
from domain.section_diff import apply_diff, compute_diff, dirty_save_keys, has_pending_uploads
from domain.validation import validate_section
from domain.working_copy import WorkingCopy
from infra.perf import span as perf_span
from services.errors import ApiError, UploadFailure, UploadPartialFailure, ValidationError, describe
from services.notifications import Notifier, destructive, info, success
from services.resource_client import ResourceClient, UploadSpec, patch_path, upload_path

log = logging.getLogger(__name__)

_FLAT_KINDS = (FieldKind.TEXT, FieldKind.NUMBER, FieldKind.INTEGER, FieldKind.ID, FieldKind.BOOLEAN)


class SaveStatus(str, Enum):
    SAVED = "saved"
    NOTHING_TO_SAVE = "nothing_to_save"
    FAILED = "failed"
    BUSY = "busy"


@dataclass(frozen=True)
class SaveResult:
    key: SaveKey
    status: SaveStatus
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status in (SaveStatus.SAVED, SaveStatus.NOTHING_TO_SAVE)


SaveCallback = Callable[[SaveResult], None]


@dataclass
class SavePlan:
    key: SaveKey
    record_id: str
    working: Dict[str, Any]
    baseline: Dict[str, Any]
    # (media field, endpoint path, files)
    uploads: List[Tuple[str, str, List[UploadSpec]]] = field(default_factory=list)


@dataclass
class SaveOutcome:
    uploaded: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    failed: Dict[str, Dict[str, str]] = field(default_factory=dict)
    sent: Optional[Dict[str, Any]] = None
    response: Dict[str, Any] = field(default_factory=dict)
    error: Optional[BaseException] = None


# ---------------------------------------------------------------------------
# pure helpers (also used on the worker)
# ---------------------------------------------------------------------------

def _media_lists(section: Section, values: Dict[str, Any], item_id: Any) -> Dict[str, List[Dict[str, Any]]]:
    """Media lists of the saved unit, by field (live references into *values*)."""
    if section == Section.MEDIA:
        out = {}
        for name in (K.IMAGES, K.VIDEOS):
            if not isinstance(values.get(name), list):
                values[name] = []
            out[name] = values[name]
        return out
    if section == Section.VARIANTS and item_id is not None:
        for variant in values.get(K.VARIANTS) or []:
            if str(variant.get(VK.ID)) == str(item_id):
                if not isinstance(variant.get(VK.IMAGES), list):
                    variant[VK.IMAGES] = []
                return {VK.IMAGES: variant[VK.IMAGES]}
    return {}


def resolved_items(
    section: Section,
    working: Mapping[str, Any],
    uploaded: Mapping[str, Mapping[str, Mapping[str, Any]]],
    item_id: Any = None,
) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Uploaded items in their working-copy form.

    The server item replaces the pending one, keeping the primary flag the
    user set on the pending item.
    """
    values = copy.deepcopy(dict(working))
    out: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for name, items in _media_lists(section, values, item_id).items():
        done = uploaded.get(name) or {}
        for it in items:
            key = it.get(MK.LOCAL_KEY)
            if it.get(MK.ID) is None and key in done:
                item = dict(done[key])
                if it.get(MK.IS_PRIMARY):
                    item[MK.IS_PRIMARY] = True
                out.setdefault(name, {})[key] = item
    return out


def with_uploads(
    section: Section,
    working: Mapping[str, Any],
    uploaded: Mapping[str, Mapping[str, Mapping[str, Any]]],
    item_id: Any = None,
) -> Dict[str, Any]:
    """Copy of *working* with uploaded pending items swapped in place."""
    resolved = resolved_items(section, working, uploaded, item_id)
    values = copy.deepcopy(dict(working))
    for name, items in _media_lists(section, values, item_id).items():
        done = resolved.get(name) or {}
        for i, it in enumerate(items):
            key = it.get(MK.LOCAL_KEY)
            if it.get(MK.ID) is None and key in done:
                items[i] = copy.deepcopy(done[key])
    return values


def baseline_with_uploads(
    section: Section,
    baseline: Mapping[str, Any],
    uploaded: Mapping[str, Mapping[str, Mapping[str, Any]]],
    item_id: Any = None,
) -> Dict[str, Any]:
    """*baseline* with the server's uploaded items appended (server order)."""
    values = copy.deepcopy(dict(baseline))
    for name, items in _media_lists(section, values, item_id).items():
        for item in (uploaded.get(name) or {}).values():
            items.append(copy.deepcopy(dict(item)))
    return normalize_section(section, values)


def _overlay_response(section: Section, values: Dict[str, Any], response: Mapping[str, Any], item_id: Any) -> Dict[str, Any]:
    """Write the scalar fields the server returned onto *values*."""
    out = copy.deepcopy(values)
    if section == Section.VARIANTS:
        for variant in out.get(K.VARIANTS) or []:
            if str(variant.get(VK.ID)) == str(item_id):
                for spec in VARIANT_FIELDS:
                    if spec.name in response:
                        variant[spec.name] = copy.deepcopy(response[spec.name])
        return out
    for spec in section_fields(section):
        if spec.kind in _FLAT_KINDS and spec.name in response:
            out[spec.name] = copy.deepcopy(response[spec.name])
    return out


def execute_plan(client: ResourceClient, plan: SavePlan) -> SaveOutcome:
    """Network part of a save. Runs on a worker; touches only *plan*."""
    outcome = SaveOutcome()
    key = plan.key
    failures: List[UploadFailure] = []

    for media_field, path, files in plan.uploads:
        with perf_span(f"upload {key.label()} {media_field}", threshold_ms=200.0):
            try:
                done = client.upload_files(plan.record_id, path, files)
            except UploadPartialFailure as e:
                done = dict(e.uploaded)
                failures.extend(e.failures)
            except ApiError as e:
                log.warning("upload batch for %s rejected: %s", key.label(), e)
                failures.extend(UploadFailure(lk, lp, e.message) for lk, lp in files)
                done = {}
        if done:
            outcome.uploaded[media_field] = dict(done)
        for failure in failures:
            if any(failure.local_key == lk for lk, _ in files):
                outcome.failed.setdefault(media_field, {})[failure.local_key] = failure.message

    if failures:
        flat = {lk: item for items in outcome.uploaded.values() for lk, item in items.items()}
        outcome.error = UploadPartialFailure(failures, flat)
        return outcome

    working = with_uploads(key.section, plan.working, outcome.uploaded, key.item_id)
    baseline = baseline_with_uploads(key.section, plan.baseline, outcome.uploaded, key.item_id)
    diff = compute_diff(key.section, working, baseline, key.item_id)
    if not diff:
        return outcome

    try:
        with perf_span(f"save {key.label()}", threshold_ms=200.0):
            response = client.patch(plan.record_id, patch_path(key), diff)
    except ApiError as e:
        outcome.error = e
        return outcome
    outcome.sent = diff
    outcome.response = dict(response or {})
    return outcome


def section_title(key: SaveKey) -> str:
    title = SECTION_TITLES.get(key.section, str(key.label()))
    if key.item_id is not None:
        return f"{title} ({key.item_id})"
    return title


# ---------------------------------------------------------------------------
# controller
# ---------------------------------------------------------------------------

class SectionSaveController:
    """Saves one section (or one variant) at a time, with in-flight bookkeeping."""

    def __init__(
        self,
        client: ResourceClient,
        working: WorkingCopy,
        tracker: DirtyTracker,
        runner: Any,
        *,
        notifier: Optional[Notifier] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.client = client
        self.working = working
        self.tracker = tracker
        self.runner = runner
        self.notifier = notifier
        self.bus = bus or EventBus()
        self._in_flight: Set[SaveKey] = set()
        self._waiters: Dict[SaveKey, List[SaveCallback]] = {}
        self._field_errors: Dict[SaveKey, Dict[str, str]] = {}
        self._disposed = False

    # --------- state ---------
    def is_saving(self, key: Optional[SaveKey] = None) -> bool:
        if key is None:
            return bool(self._in_flight)
        return key in self._in_flight

    @property
    def in_flight(self) -> Set[SaveKey]:
        return set(self._in_flight)

    def field_errors(self, key: SaveKey) -> Dict[str, str]:
        return dict(self._field_errors.get(key, {}))

    def dispose(self) -> None:
        """Tear down: results that arrive later are discarded.

        Callers still waiting on an in-flight save are told it failed, so a
        pending "save everything" (the guard's Save choice) always resolves.
        """
        self._disposed = True
        waiters, self._waiters = self._waiters, {}
        for key, callbacks in waiters.items():
            log.debug("save of %s abandoned on dispose", key.label())
            for cb in callbacks:
                cb(SaveResult(key, SaveStatus.FAILED))

    def baseline_sections(self) -> Dict[Section, Dict[str, Any]]:
        baseline = self.tracker.baseline
        if baseline is None:
            return {}
        return {sec: baseline.section(sec) for sec in SECTION_ORDER}

    def dirty_keys(self) -> List[SaveKey]:
        return dirty_save_keys(self.working.all_values(), self.baseline_sections())

    # --------- step 1 ---------
    def prepare(self, key: SaveKey) -> Optional[SavePlan]:
        """Snapshot what a save of *key* would send. None means nothing to save."""
        if self.tracker.baseline is None:
            raise RuntimeError("Cannot save before the record is loaded")
        section = Section(key.section)
        if section == Section.VARIANTS and key.item_id is None:
            raise ValueError("Variants are saved one item at a time")
        working = self.working.values(section)
        baseline = self.tracker.baseline.section(section)

        diff = compute_diff(section, working, baseline, key.item_id)
        if not diff and not has_pending_uploads(section, working, key.item_id):
            return None

        plan = SavePlan(key=key, record_id=self.working.record_id, working=working, baseline=baseline)
        for media_field, items in _media_lists(section, copy.deepcopy(working), key.item_id).items():
            files = [(it[MK.LOCAL_KEY], it[MK.LOCAL_PATH]) for it in pending_media(items) if it.get(MK.LOCAL_KEY)]
            if files:
                plan.uploads.append((media_field, upload_path(key, media_field), files))
        return plan

    # --------- entry points ---------
    def save(self, key: SaveKey, on_done: Optional[SaveCallback] = None) -> Optional[SaveResult]:
        """Start saving *key*.

        Returns the result right away when the save finishes without a
        network round-trip (NOTHING_TO_SAVE, BUSY, or FAILED when the
        section does not pass the client-side checks); otherwise None and
        *on_done* is called once the save resolves.
        """
        if key in self._in_flight:
            log.debug("save of %s refused: already in flight", key.label())
            result = SaveResult(key, SaveStatus.BUSY)
            if on_done is not None:
                on_done(result)
            return result

        plan = self.prepare(key)
        if plan is None:
            self._notify(info("No Changes", f"{section_title(key)} has no changes to save."))
            self.bus.emit(SectionSaved(key, nothing_to_save=True))
            result = SaveResult(key, SaveStatus.NOTHING_TO_SAVE)
            if on_done is not None:
                on_done(result)
            return result

        errors = validate_section(key.section, plan.working, key.item_id)
        if errors:
            log.info("save of %s blocked: %d invalid field(s)", key.label(), len(errors))
            result = self._failed(key, ValidationError("Some fields are invalid.", status=None, field_errors=errors))
            if on_done is not None:
                on_done(result)
            return result

        self._in_flight.add(key)
        self._waiters[key] = [on_done] if on_done is not None else []
        self.bus.emit(SectionSaveStarted(key))
        log.info("saving %s (%d upload batch(es))", key.label(), len(plan.uploads))
        self.runner.submit(
            lambda: execute_plan(self.client, plan),
            lambda outcome: self._apply(plan, outcome),
            lambda exc: self._apply(plan, SaveOutcome(error=exc)),
            label=f"save {key.label()}",
        )
        return None

    def save_all_dirty(self, on_done: Callable[[List[SaveResult]], None]) -> None:
        """Save every dirty unit; *on_done* gets all results once they resolve.

        Units already in flight are waited on, not saved twice.
        """
        keys = list(self._in_flight)
        keys += [k for k in self.dirty_keys() if k not in self._in_flight]
        if not keys:
            on_done([])
            return
        results: List[SaveResult] = []

        def _collect(result: SaveResult) -> None:
            results.append(result)
            if len(results) == len(keys):
                on_done(results)

        for key in keys:
            if key in self._in_flight:
                self._waiters.setdefault(key, []).append(_collect)
            else:
                self.save(key, _collect)

    # --------- step 3 ---------
    def _apply(self, plan: SavePlan, outcome: SaveOutcome) -> None:
        key = plan.key
        self._in_flight.discard(key)
        waiters = self._waiters.pop(key, [])
        if self._disposed:
            log.debug("discarding late result for %s", key.label())
            return

        section = Section(key.section)
        variant_id = key.item_id if section == Section.VARIANTS else None
        baseline = self.tracker.baseline.section(section)

        with self.tracker.suspend_tracking():
            if outcome.uploaded or outcome.failed:
                resolved = resolved_items(section, plan.working, outcome.uploaded, key.item_id)
                for media_field in sorted(set(outcome.uploaded) | set(outcome.failed)):
                    self.working.resolve_pending_media(
                        resolved.get(media_field, {}),
                        outcome.failed.get(media_field, {}),
                        field=media_field,
                        variant_id=variant_id,
                    )
                baseline = baseline_with_uploads(section, baseline, outcome.uploaded, key.item_id)

            if outcome.sent is not None:
                sent_values = with_uploads(section, plan.working, outcome.uploaded, key.item_id)
                self._merge_response(section, key.item_id, sent_values, outcome.response)
                baseline = apply_diff(section, baseline, outcome.sent, key.item_id)
                baseline = _overlay_response(section, baseline, outcome.response, key.item_id)

            if outcome.uploaded or outcome.sent is not None:
                self.tracker.rebaseline_section(section, baseline)

        if outcome.error is not None:
            result = self._failed(key, outcome.error)
        else:
            self._field_errors.pop(key, None)
            self._notify(success(f"{section_title(key)} Updated", "Your changes have been saved."))
            self.bus.emit(SectionSaved(key))
            result = SaveResult(key, SaveStatus.SAVED)
        for cb in waiters:
            cb(result)

    def _merge_response(self, section: Section, item_id: Any, sent_values: Mapping[str, Any], response: Mapping[str, Any]) -> None:
        """Copy server values into the working copy, except where the user edited since."""
        if not response:
            return
        if section == Section.VARIANTS:
            current = self.working.variant(item_id) or {}
            sent = next((v for v in sent_values.get(K.VARIANTS) or [] if str(v.get(VK.ID)) == str(item_id)), {})
            updates = {
                spec.name: response[spec.name]
                for spec in VARIANT_FIELDS
                if spec.name in response
                and normalize_value(spec.kind, current.get(spec.name)) == normalize_value(spec.kind, sent.get(spec.name))
            }
            if updates:
                self.working.merge_variant(item_id, updates)
            return
        current = self.working.values(section)
        updates = {
            spec.name: response[spec.name]
            for spec in section_fields(section)
            if spec.kind in _FLAT_KINDS
            and spec.name in response
            and normalize_value(spec.kind, current.get(spec.name)) == normalize_value(spec.kind, sent_values.get(spec.name))
        }
        if updates:
            self.working.merge_section(section, updates)

    def _failed(self, key: SaveKey, error: BaseException) -> SaveResult:
        if isinstance(error, ValidationError):
            self._field_errors[key] = dict(error.field_errors)
        log.warning("save of %s failed: %s", key.label(), error)
        title = getattr(error, "title", None) or "Update Failed"
        self._notify(destructive(title, f"{section_title(key)}: {describe(error)}"))
        self.bus.emit(SectionSaveFailed(key, error))
        return SaveResult(key, SaveStatus.FAILED, error)

    def _notify(self, notification) -> None:
        if self.notifier is not None:
            self.notifier.notify(notification)
