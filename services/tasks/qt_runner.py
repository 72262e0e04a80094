# -*- coding: utf-8 -*-
"""Qt-backed task runner (QThreadPool/QRunnable).

Tasks run on the global thread pool; results come back through a queued
signal to a QObject living on the UI thread, so callbacks never run on a
worker thread.
"""
from __future__ import annotations

import itertools
import logging
import traceback
from typing import Any, Callable, Dict, Tuple

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

from infra.perf import span as perf_span

log = logging.getLogger(__name__)


class _WorkerSignals(QObject):
    finished = pyqtSignal(int, object)
    error = pyqtSignal(int, object)


class _TaskWorker(QRunnable):
    def __init__(self, task_id: int, fn: Callable[[], Any], label: str) -> None:
        super().__init__()
        self._task_id = int(task_id)
        self._fn = fn
        self._label = label
        self.signals = _WorkerSignals()

    def run(self) -> None:
        try:
            with perf_span(self._label, threshold_ms=200.0):
                result = self._fn()
            self.signals.finished.emit(self._task_id, result)
        except Exception as exc:
            tb = traceback.format_exc()
            self.signals.error.emit(self._task_id, (exc, tb))


class QtTaskRunner(QObject):
    def __init__(self, parent: QObject = None, pool: QThreadPool = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._ids = itertools.count(1)
        self._callbacks: Dict[int, Tuple[Callable[[Any], None], Callable[[BaseException], None]]] = {}

    def submit(self, fn: Callable[[], Any], on_success, on_error, *, label: str = "task") -> None:
        task_id = next(self._ids)
        self._callbacks[task_id] = (on_success, on_error)
        worker = _TaskWorker(task_id, fn, label)
        # Signals are created on this (UI) thread; the slots below are bound
        # to this QObject so delivery is queued onto the UI thread.
        worker.signals.finished.connect(self._on_finished)
        worker.signals.error.connect(self._on_error)
        self._pool.start(worker)

    @pyqtSlot(int, object)
    def _on_finished(self, task_id: int, result: object) -> None:
        callbacks = self._callbacks.pop(task_id, None)
        if callbacks is None:
            return
        callbacks[0](result)

    @pyqtSlot(int, object)
    def _on_error(self, task_id: int, payload: object) -> None:
        callbacks = self._callbacks.pop(task_id, None)
        if callbacks is None:
            return
        exc = payload
        if isinstance(payload, tuple) and len(payload) == 2:
            exc, tb = payload
            log.debug("task %s failed:\n%s", task_id, tb)
        callbacks[1](exc)
