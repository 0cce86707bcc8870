"""
Reading synthesis: turns one agent's tick into a device-typed telemetry payload.

``synthesize_reading`` is a pure function of its inputs plus the injected random
source. It never touches shared state, so the orchestrator can call it from
every agent's concurrent step without coordination.

Field contract per device type:
- GPS Collar: temperature, batteryLevel, heartbeat, altitude, speed, motion
- Camera Trap: motion, batteryLevel, temperature, imagesCaptured (on motion)
- Motion Sensor: motion, batteryLevel, signalStrength
- Weather Station: temperature, metadata{humidity, windSpeed, rainfall,
  pressure, uvIndex}

Precision contract: coordinates carry 8 decimals, physical quantities 2.
Battery level, heart rate and image counts are whole numbers because the
ingestion store declares those columns INTEGER.
"""

import random
from datetime import datetime, timezone
from typing import Any, Dict

from wildsim.schemas import (
    AgentConfig,
    AgentRuntimeState,
    DeviceType,
    EnvironmentState,
    MovementInfo,
    Reading,
    TimeOfDay,
)

COORDINATE_DECIMALS = 8
QUANTITY_DECIMALS = 2

TEMPERATURE_JITTER = 1.5
ALTITUDE_JITTER = 5.0
HEARTBEAT_RANGE = (60.0, 80.0)
EXERTION_SPEED_KMH = 5.0
EXERTION_FACTOR = 1.2
RESTING_HEART_FACTOR = 0.7

CAMERA_TWILIGHT_MOTION_P = 0.4
CAMERA_MOTION_P = 0.2
CAMERA_IMAGES_RANGE = (1, 5)
TWILIGHT_HOURS = frozenset({5, 6, 7, 17, 18, 19})

MOTION_SENSOR_P = 0.35
SIGNAL_STRENGTH_RANGE = (60.0, 100.0)

PRESSURE_RANGE = (1010.0, 1020.0)
UV_BASE_RANGE = (-1.0, 4.0)
UV_FACTORS = {
    TimeOfDay.MORNING: 1.0,
    TimeOfDay.AFTERNOON: 2.5,
    TimeOfDay.EVENING: 0.5,
    TimeOfDay.NIGHT: 0.0,
}


def _q(value: float) -> float:
    return round(value, QUANTITY_DECIMALS)


def format_timestamp(now: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _collar_fields(
    config: AgentConfig,
    movement: MovementInfo,
    environment: EnvironmentState,
    rng: random.Random,
) -> Dict[str, Any]:
    heartbeat = rng.uniform(*HEARTBEAT_RANGE)
    if movement.speed > EXERTION_SPEED_KMH:
        heartbeat *= EXERTION_FACTOR
    if movement.is_resting:
        heartbeat *= RESTING_HEART_FACTOR

    return {
        "temperature": _q(
            environment.base_temperature + rng.uniform(-TEMPERATURE_JITTER, TEMPERATURE_JITTER)
        ),
        "heartbeat": round(heartbeat),
        "altitude": _q(config.anchor_altitude + rng.uniform(-ALTITUDE_JITTER, ALTITUDE_JITTER)),
        "speed": 0.0 if movement.is_resting else _q(movement.speed),
        "motion": not movement.is_resting,
    }


def _camera_fields(
    environment: EnvironmentState, now: datetime, rng: random.Random
) -> Dict[str, Any]:
    probability = CAMERA_TWILIGHT_MOTION_P if now.hour in TWILIGHT_HOURS else CAMERA_MOTION_P
    motion = rng.random() < probability
    fields: Dict[str, Any] = {
        "motion": motion,
        "temperature": _q(
            environment.base_temperature + rng.uniform(-TEMPERATURE_JITTER, TEMPERATURE_JITTER)
        ),
    }
    if motion:
        fields["images_captured"] = rng.randint(*CAMERA_IMAGES_RANGE)
    return fields


def _motion_sensor_fields(rng: random.Random) -> Dict[str, Any]:
    return {
        "motion": rng.random() < MOTION_SENSOR_P,
        "signal_strength": _q(rng.uniform(*SIGNAL_STRENGTH_RANGE)),
    }


def _weather_fields(
    environment: EnvironmentState, movement: MovementInfo, rng: random.Random
) -> Dict[str, Any]:
    uv_index = max(0.0, rng.uniform(*UV_BASE_RANGE) * UV_FACTORS[movement.time_of_day])
    return {
        "temperature": _q(environment.base_temperature),
        "metadata": {
            "humidity": _q(environment.humidity),
            "windSpeed": _q(environment.wind_speed),
            "rainfall": _q(environment.rainfall),
            "pressure": _q(rng.uniform(*PRESSURE_RANGE)),
            "uvIndex": _q(uv_index),
        },
    }


def synthesize_reading(
    config: AgentConfig,
    state: AgentRuntimeState,
    movement: MovementInfo,
    environment: EnvironmentState,
    now: datetime,
    rng: random.Random,
) -> Reading:
    """Compose the reading an agent emits for the current tick.

    Args:
        config: Static agent configuration
        state: Agent state after movement and battery drain for this tick
        movement: Movement facts for this tick
        environment: Snapshot of the shared environment (read only)
        now: Simulated time of the tick
        rng: Random source for sensor noise

    Returns:
        Immutable Reading ready for delivery
    """
    device = config.device_type
    fields: Dict[str, Any] = {}

    if device is DeviceType.GPS_COLLAR:
        fields = _collar_fields(config, movement, environment, rng)
    elif device is DeviceType.CAMERA_TRAP:
        fields = _camera_fields(environment, now, rng)
    elif device is DeviceType.MOTION_SENSOR:
        fields = _motion_sensor_fields(rng)
    elif device is DeviceType.WEATHER_STATION:
        fields = _weather_fields(environment, movement, rng)

    # Weather stations report conditions only, not a battery level
    if device is not DeviceType.WEATHER_STATION:
        fields["battery_level"] = int(state.battery_charge)

    return Reading(
        sensor_id=config.id,
        device_type=device,
        species_id=config.species_id,
        latitude=round(state.position.lat, COORDINATE_DECIMALS),
        longitude=round(state.position.lng, COORDINATE_DECIMALS),
        timestamp=format_timestamp(now),
        **fields,
    )
