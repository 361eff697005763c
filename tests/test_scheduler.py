from __future__ import annotations

import pytest

from gauge_agent.core.scheduler import MetricsScheduler, compute_sleep, next_boundary

from .helpers.fakes import RecordingSink


BASE = 60 * 28_333_333


class StaticInspector:
    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot or {}
        self.error = error
        self.calls = 0

    def inspect(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.snapshot)


class FailingSink:
    def __init__(self, failing):
        self.failing = failing
        self.sent = {}

    def gauge(self, name, value):
        if name == self.failing:
            raise ConnectionError("collector down")
        self.sent[name] = value


@pytest.mark.parametrize("second", [0, 1, 15, 30, 59])
def test_sleep_reaches_next_minute_boundary(second):
    assert compute_sleep(BASE + second) == 60 - second


def test_fractional_seconds_and_other_intervals():
    assert compute_sleep(BASE + 12.5) == pytest.approx(47.5)
    assert next_boundary(BASE + 7, interval=10) == BASE + 10
    assert compute_sleep(BASE + 7, interval=10) == 3


def test_interval_must_be_positive(agent_logger):
    with pytest.raises(ValueError):
        MetricsScheduler(StaticInspector(), RecordingSink(), "web01", agent_logger, interval=0)


def test_run_once_prefixes_hostname(agent_logger):
    sink = RecordingSink()
    scheduler = MetricsScheduler(
        StaticInspector({"cpu.idle": 80.0, "memory.free_mb": 512.0}),
        sink, "web01", agent_logger
    )

    assert scheduler.run_once() == 2
    assert sink.gauges == {"web01.cpu.idle": 80.0, "web01.memory.free_mb": 512.0}
    assert scheduler.get_status()["cycles_run"] == 1


def test_sink_error_does_not_stop_remaining_gauges(agent_logger):
    sink = FailingSink("web01.cpu.idle")
    scheduler = MetricsScheduler(
        StaticInspector({"cpu.idle": 80.0, "cpu.user": 15.0, "memory.free_mb": 512.0}),
        sink, "web01", agent_logger
    )

    assert scheduler.run_once() == 2
    assert sink.sent == {"web01.cpu.user": 15.0, "web01.memory.free_mb": 512.0}


def test_inspection_error_is_contained(agent_logger):
    sink = RecordingSink()
    scheduler = MetricsScheduler(StaticInspector(error=RuntimeError("boom")), sink, "web01", agent_logger)

    assert scheduler.run_once() == 0
    assert sink.gauges == {}


class SteppingClock:
    """Clock that only moves when a wait elapses or a cycle takes time."""

    def __init__(self, now):
        self.now = now

    def time(self):
        return self.now


class SlowInspector(StaticInspector):
    def __init__(self, clock, duration, snapshot=None):
        super().__init__(snapshot or {"cpu.idle": 1.0})
        self.clock = clock
        self.duration = duration
        self.started_at = []

    def inspect(self):
        self.started_at.append(self.clock.now)
        self.clock.now += self.duration
        return super().inspect()


def run_loop(scheduler, clock, monkeypatch, max_waits):
    waits = []

    def fake_wait(timeout=None):
        waits.append(timeout)
        if len(waits) > max_waits:
            return True
        clock.now += timeout
        return False

    monkeypatch.setattr(scheduler.stop_event, "wait", fake_wait)
    scheduler.run()
    return waits


def test_loop_waits_until_each_boundary(agent_logger, monkeypatch):
    clock = SteppingClock(BASE + 20)
    inspector = SlowInspector(clock, duration=5)
    scheduler = MetricsScheduler(inspector, RecordingSink(), "web01", agent_logger, clock=clock.time)

    waits = run_loop(scheduler, clock, monkeypatch, max_waits=3)

    assert waits[:3] == [40, 55, 55]
    assert inspector.started_at == [BASE + 60, BASE + 120, BASE + 180]
    assert scheduler.is_running is False


def test_slow_cycle_catches_up_immediately(agent_logger, monkeypatch):
    clock = SteppingClock(BASE + 20)
    inspector = SlowInspector(clock, duration=70)
    scheduler = MetricsScheduler(inspector, RecordingSink(), "web01", agent_logger, clock=clock.time)

    waits = run_loop(scheduler, clock, monkeypatch, max_waits=3)

    # The cycle started at +60 ends at +130, past the +120 boundary
    assert waits[:3] == [40, 0, 0]
    assert inspector.started_at == [BASE + 60, BASE + 130, BASE + 200]


def test_cycle_finishing_early_does_not_rerun_same_boundary(agent_logger, monkeypatch):
    # Wakes slightly before the boundary: the cycle still counts for it
    clock = SteppingClock(BASE + 20)
    inspector = SlowInspector(clock, duration=1)
    scheduler = MetricsScheduler(inspector, RecordingSink(), "web01", agent_logger, clock=clock.time)
    waits = []

    def early_wait(timeout=None):
        waits.append(timeout)
        if len(waits) > 2:
            return True
        clock.now += max(0.0, timeout - 0.5)
        return False

    monkeypatch.setattr(scheduler.stop_event, "wait", early_wait)
    scheduler.run()

    assert waits[1] == pytest.approx(59.5)
    assert inspector.calls == 2


def test_stop_before_boundary_skips_cycle(agent_logger):
    inspector = StaticInspector({"cpu.idle": 1.0})
    scheduler = MetricsScheduler(inspector, RecordingSink(), "web01", agent_logger)
    scheduler.stop_event.wait = lambda timeout=None: True

    scheduler.run()

    assert inspector.calls == 0
