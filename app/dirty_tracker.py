# -*- coding: utf-8 -*-
"""Unsaved-changes state (snapshot based, UI-agnostic).

The dirty flag is never toggled by hand: it is always the result of
comparing the working copy against the baseline snapshot, section by
section, in normalized form (see domain.product_schema).
"""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.sections import SECTION_ORDER, Section
from domain.product_schema import normalize_section
from domain.working_copy import WorkingCopy

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaselineSnapshot:
    """Immutable, normalized copy of the last-known-saved state.

    Never mutated in place; ``with_section`` returns a new snapshot.
    """

    record_id: str
    _sections: Mapping[Section, Mapping[str, Any]] = field(repr=False)

    def section(self, section: Section) -> Dict[str, Any]:
        return copy.deepcopy(dict(self._sections.get(section, {})))

    def with_section(self, section: Section, values: Mapping[str, Any]) -> "BaselineSnapshot":
        sections = {sec: copy.deepcopy(dict(vals)) for sec, vals in self._sections.items()}
        sections[section] = normalize_section(section, values)
        return BaselineSnapshot(record_id=self.record_id, _sections=sections)


def capture_baseline(working: WorkingCopy) -> BaselineSnapshot:
    """Deep-clone every tracked sub-state of *working* into a snapshot."""
    sections = {sec: normalize_section(sec, working.values(sec)) for sec in SECTION_ORDER}
    return BaselineSnapshot(record_id=working.record_id, _sections=sections)


def dirty_sections(working: WorkingCopy, baseline: Optional[BaselineSnapshot]) -> List[Section]:
    if baseline is None:
        return []
    out = []
    for sec in SECTION_ORDER:
        if normalize_section(sec, working.values(sec)) != baseline.section(sec):
            out.append(sec)
    return out


def is_dirty(working: WorkingCopy, baseline: Optional[BaselineSnapshot]) -> bool:
    """True if any tracked section of *working* differs from *baseline*."""
    return bool(dirty_sections(working, baseline))


class DirtyTracker:
    """Owns the baseline and keeps the derived dirty flag current.

    ``attach`` subscribes to the working copy so every mutation recomputes
    the flag synchronously. ``on_change`` is called with the new flag value
    whenever it flips.
    """

    def __init__(self, on_change: Optional[Callable[[bool], None]] = None) -> None:
        self.is_dirty = False
        self.baseline: Optional[BaselineSnapshot] = None
        self.last_change_summary = ""
        self._dirty_sections: List[Section] = []
        self._on_change = on_change
        self._working: Optional[WorkingCopy] = None
        self._suspend_depth = 0

    @property
    def suspended(self) -> bool:
        return bool(self._suspend_depth > 0)

    @property
    def dirty_sections(self) -> List[Section]:
        return list(self._dirty_sections)

    def attach(self, working: WorkingCopy) -> None:
        self._working = working
        working.on_change(lambda _section: self.recompute())

    # --------- baseline management ---------
    def capture_baseline(self, working: Optional[WorkingCopy] = None) -> BaselineSnapshot:
        working = working or self._working
        if working is None:
            raise RuntimeError("DirtyTracker has no working copy")
        self.baseline = capture_baseline(working)
        self.recompute(working, force=True)
        return self.baseline

    def rebaseline_section(self, section: Section, values: Mapping[str, Any]) -> BaselineSnapshot:
        if self.baseline is None:
            raise RuntimeError("No baseline captured yet")
        self.baseline = self.baseline.with_section(section, values)
        self.recompute(force=True)
        return self.baseline

    # --------- flag ---------
    def recompute(self, working: Optional[WorkingCopy] = None, *, force: bool = False) -> bool:
        if self.suspended and not force:
            return self.is_dirty
        working = working or self._working
        if working is None or self.baseline is None:
            return self.is_dirty
        sections = dirty_sections(working, self.baseline)
        self._dirty_sections = sections
        self.last_change_summary = ",".join(s.value for s in sections)
        self._set(bool(sections))
        return self.is_dirty

    def _set(self, dirty: bool) -> None:
        if dirty == self.is_dirty:
            return
        self.is_dirty = dirty
        log.debug("dirty flag -> %s (%s)", dirty, self.last_change_summary)
        if self._on_change is not None:
            self._on_change(dirty)

    def section_is_dirty(self, section: Section) -> bool:
        return section in self._dirty_sections

    # --------- bulk edits ---------
    def suspend(self) -> None:
        self._suspend_depth += 1

    def resume(self) -> None:
        if self._suspend_depth > 0:
            self._suspend_depth -= 1
        if self._suspend_depth == 0:
            self.recompute()

    @contextmanager
    def suspend_tracking(self):
        """Batch several mutations into one recomputation."""
        self.suspend()
        try:
            yield
        finally:
            self.resume()
