"""Tests for per-device battery depletion."""

import random

from wildsim.battery import (
    BATTERY_FLOOR,
    DRAIN_PER_TICK,
    drain_battery,
    initial_charge,
)
from wildsim.schemas import DeviceType


def test_drain_subtracts_device_step():
    assert drain_battery(80.0, DeviceType.GPS_COLLAR) == 80.0 - DRAIN_PER_TICK[DeviceType.GPS_COLLAR]
    assert drain_battery(80.0, DeviceType.CAMERA_TRAP) == 80.0 - DRAIN_PER_TICK[DeviceType.CAMERA_TRAP]


def test_drain_order_matches_power_draw():
    drains = DRAIN_PER_TICK
    assert (
        drains[DeviceType.GPS_COLLAR]
        > drains[DeviceType.WEATHER_STATION]
        > drains[DeviceType.MOTION_SENSOR]
        > drains[DeviceType.CAMERA_TRAP]
        > 0
    )


def test_drain_never_falls_below_floor():
    charge = 5.02
    for _ in range(10):
        charge = drain_battery(charge, DeviceType.GPS_COLLAR)
        assert charge >= BATTERY_FLOOR
    assert charge == BATTERY_FLOOR


def test_charge_is_non_increasing_over_long_runs():
    rng = random.Random(3)
    for device in DeviceType:
        charge = initial_charge(rng)
        for _ in range(5000):
            new_charge = drain_battery(charge, device)
            assert new_charge <= charge
            assert new_charge >= BATTERY_FLOOR
            charge = new_charge


def test_initial_charge_range():
    rng = random.Random(11)
    charges = [initial_charge(rng) for _ in range(500)]
    assert all(70.0 <= charge <= 100.0 for charge in charges)
