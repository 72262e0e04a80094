# -*- coding: utf-8 -*-
"""Task runners (pure, no UI dependencies).

A runner executes a blocking callable (network I/O) and delivers its result
to ``on_success`` / ``on_error``. Callbacks always run on the caller's
(UI) thread; only the callable itself may run elsewhere.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

log = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class ImmediateRunner:
    """Runs the task inline. Used headless and for simple tests."""

    def submit(self, fn: Callable[[], Any], on_success: SuccessCallback, on_error: ErrorCallback, *, label: str = "task") -> None:
        try:
            result = fn()
        except Exception as exc:
            log.debug("task %s failed", label, exc_info=True)
            on_error(exc)
            return
        on_success(result)


class QueuedRunner:
    """Holds tasks until ``run_next``/``drain`` is called.

    Lets callers interleave completions (and edits between them) in a
    deterministic order, e.g. to resolve two saves out of order.
    """

    def __init__(self) -> None:
        self._queue: Deque[Tuple[Callable[[], Any], SuccessCallback, ErrorCallback]] = deque()

    def submit(self, fn: Callable[[], Any], on_success: SuccessCallback, on_error: ErrorCallback, *, label: str = "task") -> None:
        self._queue.append((fn, on_success, on_error))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_next(self, index: int = 0) -> None:
        if not self._queue:
            raise IndexError("no pending tasks")
        self._queue.rotate(-index)
        task = self._queue.popleft()
        self._queue.rotate(index)
        ImmediateRunner().submit(*task)

    def run_last(self) -> None:
        self.run_next(len(self._queue) - 1)

    def drain(self, limit: Optional[int] = None) -> int:
        done = 0
        while self._queue and (limit is None or done < limit):
            self.run_next()
            done += 1
        return done
