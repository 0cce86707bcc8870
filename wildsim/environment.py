"""
Shared environmental model.

One EnvironmentState is shared by every agent. It drifts slowly: conditions
change at most once per ``UPDATE_INTERVAL`` of simulated time no matter how
fast ticks fire, so readings from neighbouring ticks stay coherent.

Drift rules per update:
- Temperature: random walk of ±1 °C, clamped to [15, 35]
- Humidity: random walk of ±5 %, clamped to [20, 90]
- Wind speed: random walk of ±2.5 m/s, clamped to [0, 25]
- Rainfall: 10% chance of a fresh rain event (0-8 mm), otherwise the ground
  dries out by a fixed step, floored at 0
"""

import random
from datetime import datetime, timedelta

from wildsim.schemas import EnvironmentState

UPDATE_INTERVAL = timedelta(minutes=30)

TEMPERATURE_RANGE = (15.0, 35.0)
HUMIDITY_RANGE = (20.0, 90.0)
WIND_SPEED_RANGE = (0.0, 25.0)

TEMPERATURE_STEP = 1.0
HUMIDITY_STEP = 5.0
WIND_SPEED_STEP = 2.5

RAIN_EVENT_PROBABILITY = 0.1
RAIN_EVENT_MAX_MM = 8.0
RAINFALL_DECAY_MM = 0.5


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(high, max(low, value))


def initial_environment() -> EnvironmentState:
    """Starting conditions: a mild, dry, lightly windy day."""
    return EnvironmentState()


def update_environment(
    state: EnvironmentState, now: datetime, rng: random.Random
) -> EnvironmentState:
    """Return the environment as of ``now``.

    Returns ``state`` itself when less than ``UPDATE_INTERVAL`` has elapsed
    since the last drift, so calling this every tick is safe. The very first
    call only records ``now`` as the reference point.

    Args:
        state: Current shared conditions
        now: Simulated time of the tick
        rng: Random source for the drift

    Returns:
        Updated EnvironmentState (a new object when conditions changed)
    """
    if state.last_update is None:
        return state.model_copy(update={"last_update": now})

    if now - state.last_update < UPDATE_INTERVAL:
        return state

    temperature = _clamp(
        state.base_temperature + rng.uniform(-TEMPERATURE_STEP, TEMPERATURE_STEP),
        TEMPERATURE_RANGE,
    )
    humidity = _clamp(
        state.humidity + rng.uniform(-HUMIDITY_STEP, HUMIDITY_STEP), HUMIDITY_RANGE
    )
    wind_speed = _clamp(
        state.wind_speed + rng.uniform(-WIND_SPEED_STEP, WIND_SPEED_STEP),
        WIND_SPEED_RANGE,
    )

    if rng.random() < RAIN_EVENT_PROBABILITY:
        rainfall = rng.uniform(0.0, RAIN_EVENT_MAX_MM)
    else:
        rainfall = max(0.0, state.rainfall - RAINFALL_DECAY_MM)

    return EnvironmentState(
        base_temperature=temperature,
        humidity=humidity,
        wind_speed=wind_speed,
        rainfall=rainfall,
        last_update=now,
    )
