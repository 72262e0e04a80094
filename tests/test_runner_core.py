# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from services.tasks.runner_core import ImmediateRunner, QueuedRunner


def test_immediate_runner_routes_results_and_errors() -> None:
    ok, failed = [], []
    runner = ImmediateRunner()

    runner.submit(lambda: 42, ok.append, failed.append)
    runner.submit(lambda: 1 / 0, ok.append, failed.append, label="divide")

    assert ok == [42]
    assert isinstance(failed[0], ZeroDivisionError)


def test_queued_runner_can_resolve_out_of_order() -> None:
    order = []
    runner = QueuedRunner()
    for name in ("first", "second", "third"):
        runner.submit(lambda n=name: n, order.append, order.append)

    runner.run_last()
    runner.run_next(1)
    runner.drain()

    assert order == ["third", "second", "first"]
    assert runner.pending == 0
    with pytest.raises(IndexError):
        runner.run_next()
