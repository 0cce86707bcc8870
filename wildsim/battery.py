"""Per-device battery depletion.

Charge only ever moves down, by a fixed per-tick step that depends on the
device type, and bottoms out at a floor instead of reaching zero. Device
replacement and recharging are not modelled.
"""

import random

from wildsim.schemas import DeviceType

BATTERY_FLOOR = 5.0
BATTERY_CEILING = 100.0
INITIAL_CHARGE_RANGE = (70.0, 100.0)

# Percentage points drained per tick. Collars run GPS fixes and radios
# constantly; camera traps sleep until triggered.
DRAIN_PER_TICK = {
    DeviceType.GPS_COLLAR: 0.05,
    DeviceType.WEATHER_STATION: 0.03,
    DeviceType.MOTION_SENSOR: 0.02,
    DeviceType.CAMERA_TRAP: 0.01,
}


def initial_charge(rng: random.Random) -> float:
    """Draw the starting charge for an agent seen for the first time."""
    low, high = INITIAL_CHARGE_RANGE
    return rng.uniform(low, high)


def drain_battery(charge: float, device_type: DeviceType) -> float:
    """Return the charge after one tick of use, clamped at ``BATTERY_FLOOR``."""
    return max(BATTERY_FLOOR, charge - DRAIN_PER_TICK[device_type])
