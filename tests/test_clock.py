"""Tests for the tick clocks."""

from datetime import datetime, timedelta, timezone

from wildsim.clock import SimulatedClock, wall_clock


def test_simulated_clock_first_read_is_start_then_steps():
    start = datetime(2025, 3, 1, 5, 0, tzinfo=timezone.utc)
    clock = SimulatedClock(start=start, step_seconds=60)

    assert clock() == start
    assert clock() == start + timedelta(seconds=60)
    assert clock() == start + timedelta(seconds=120)


def test_default_simulated_start_uses_same_local_offset_as_wall_clock():
    clock = SimulatedClock(step_seconds=3)

    first = clock()

    assert first.tzinfo is not None
    assert first.utcoffset() == wall_clock().utcoffset()
    assert abs(wall_clock() - first) < timedelta(seconds=5)
