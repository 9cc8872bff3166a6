"""Tests for deferred callback schedulers."""

import threading

import pytest

from promptpay_gateway.engine.scheduler import ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    """Tests for ManualScheduler."""

    def test_nothing_runs_until_advanced(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.call_later(1.0, lambda: calls.append("a"))
        assert calls == []
        assert scheduler.pending == 1

    def test_advance_runs_due_callbacks_in_time_order(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        scheduler.call_later(2.0, lambda: calls.append("late"))
        scheduler.call_later(1.0, lambda: calls.append("early"))
        scheduler.call_later(5.0, lambda: calls.append("future"))

        assert scheduler.advance(2.0) == 2
        assert calls == ["early", "late"]
        assert scheduler.now == 2.0
        assert scheduler.pending == 1

    def test_same_due_time_keeps_schedule_order(self) -> None:
        scheduler = ManualScheduler()
        calls: list[int] = []
        for i in range(3):
            scheduler.call_later(1.0, lambda i=i: calls.append(i))
        scheduler.advance(1.0)
        assert calls == [0, 1, 2]

    def test_callbacks_scheduled_while_running(self) -> None:
        scheduler = ManualScheduler()
        calls: list[float] = []

        def first() -> None:
            calls.append(scheduler.now)
            scheduler.call_later(3.0, lambda: calls.append(scheduler.now))

        scheduler.call_later(2.0, first)
        assert scheduler.run_until_idle() == 2
        assert calls == [2.0, 5.0]

    def test_run_until_idle_guards_against_loops(self) -> None:
        scheduler = ManualScheduler()

        def reschedule() -> None:
            scheduler.call_later(1.0, reschedule)

        scheduler.call_later(1.0, reschedule)
        with pytest.raises(RuntimeError):
            scheduler.run_until_idle(max_callbacks=10)


class TestThreadingScheduler:
    """Tests for ThreadingScheduler."""

    def test_callback_fires(self) -> None:
        scheduler = ThreadingScheduler()
        fired = threading.Event()
        scheduler.call_later(0.01, fired.set)
        assert fired.wait(2.0)

    def test_join_waits_for_chained_callbacks(self) -> None:
        scheduler = ThreadingScheduler()
        calls: list[str] = []
        scheduler.call_later(0.01, lambda: scheduler.call_later(0.01, lambda: calls.append("second")))
        scheduler.join()
        assert calls == ["second"]

    def test_failing_callback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        scheduler = ThreadingScheduler()

        def boom() -> None:
            raise ValueError("boom")

        scheduler.call_later(0.0, boom)
        scheduler.join()
        assert any("failed" in r.getMessage() for r in caplog.records)
