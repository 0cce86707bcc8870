"""
Movement simulator: per-agent position and heading state machine.

Each agent alternates between two states:

- Active: the heading wanders by at most ±15° per tick (momentum) and the agent
  steps along it. Step length scales with how active and how fast the agent's
  behaviour profile is at the current time of day.
- Resting: the agent stays put apart from GPS drift and reports zero speed
  for a randomly chosen number of ticks.

Territory is enforced with a soft geofence. A step that lands outside the
roaming radius is not rejected; instead the heading is turned back toward the
anchor and the position is pulled 20% of the way home. Motion stays
continuous while long-run excursion stays bounded.

Fixed-location devices (camera traps, motion sensors, weather stations) run
the same algorithm. Their tiny roaming radius caps the step and jitter sizes,
so they degenerate to sub-step wobble around the mounting point (a radius of
exactly 0 means no movement at all).

Coordinates are treated as a flat plane in degrees: headings are measured
clockwise from north, latitude grows with cos(heading) and longitude with
sin(heading).
"""

import math
import random
from dataclasses import dataclass
from typing import Dict, Tuple

from wildsim.schemas import (
    AgentConfig,
    AgentRuntimeState,
    BehaviorProfile,
    GeoPoint,
    MovementInfo,
    TimeOfDay,
)

BASE_STEP_DEGREES = 0.0005
MAX_TURN_DEGREES = 15.0
REST_JITTER_DEGREES = 0.00005
REST_TICKS_RANGE = (3, 10)
GEOFENCE_PULL_FRACTION = 0.2

# Step and jitter may not exceed these fractions of the roaming radius. With
# both below radius/3 a corrected position always lands within one tick's
# displacement of the territory edge.
STEP_RADIUS_FRACTION = 0.25
JITTER_RADIUS_FRACTION = 0.125

KM_PER_DEGREE = 111.32


@dataclass(frozen=True)
class BehaviorParams:
    """Activity parameters for one (profile, time of day) pair."""

    activity: float
    rest_probability: float
    speed_factor: float


DEFAULT_BEHAVIOR = BehaviorParams(activity=0.7, rest_probability=0.3, speed_factor=0.7)

BEHAVIOR_TABLE: Dict[Tuple[BehaviorProfile, TimeOfDay], BehaviorParams] = {
    # Predators hunt at dusk and through the night, lie up in the heat
    (BehaviorProfile.PREDATOR, TimeOfDay.MORNING): BehaviorParams(0.4, 0.5, 0.6),
    (BehaviorProfile.PREDATOR, TimeOfDay.AFTERNOON): BehaviorParams(0.2, 0.7, 0.4),
    (BehaviorProfile.PREDATOR, TimeOfDay.EVENING): BehaviorParams(0.9, 0.1, 1.0),
    (BehaviorProfile.PREDATOR, TimeOfDay.NIGHT): BehaviorParams(0.8, 0.2, 0.9),
    # Grazers feed steadily through daylight, rest at night
    (BehaviorProfile.GRAZER, TimeOfDay.MORNING): BehaviorParams(0.8, 0.2, 0.5),
    (BehaviorProfile.GRAZER, TimeOfDay.AFTERNOON): BehaviorParams(0.6, 0.3, 0.4),
    (BehaviorProfile.GRAZER, TimeOfDay.EVENING): BehaviorParams(0.7, 0.2, 0.5),
    (BehaviorProfile.GRAZER, TimeOfDay.NIGHT): BehaviorParams(0.3, 0.6, 0.3),
    # Herds move together: fewer rests, longer travel legs
    (BehaviorProfile.HERD, TimeOfDay.MORNING): BehaviorParams(0.9, 0.15, 0.7),
    (BehaviorProfile.HERD, TimeOfDay.AFTERNOON): BehaviorParams(0.6, 0.35, 0.5),
    (BehaviorProfile.HERD, TimeOfDay.EVENING): BehaviorParams(0.8, 0.2, 0.8),
    (BehaviorProfile.HERD, TimeOfDay.NIGHT): BehaviorParams(0.4, 0.5, 0.4),
    # Browsers pick through thicket slowly, most active early and late
    (BehaviorProfile.BROWSER, TimeOfDay.MORNING): BehaviorParams(0.7, 0.25, 0.4),
    (BehaviorProfile.BROWSER, TimeOfDay.AFTERNOON): BehaviorParams(0.4, 0.5, 0.3),
    (BehaviorProfile.BROWSER, TimeOfDay.EVENING): BehaviorParams(0.7, 0.25, 0.4),
    (BehaviorProfile.BROWSER, TimeOfDay.NIGHT): BehaviorParams(0.3, 0.6, 0.2),
}


def time_of_day(hour: int) -> TimeOfDay:
    """Bucket a 0-23 hour into the behaviour table's time-of-day slots."""
    if 6 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 18:
        return TimeOfDay.AFTERNOON
    if 18 <= hour < 22:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def behavior_for(config: AgentConfig, tod: TimeOfDay) -> BehaviorParams:
    """Look up behaviour parameters, falling back for fixed devices and 'none'."""
    if config.device_type.is_fixed_location:
        return DEFAULT_BEHAVIOR
    return BEHAVIOR_TABLE.get((config.behavior_profile, tod), DEFAULT_BEHAVIOR)


def step_cap(config: AgentConfig) -> float:
    return min(BASE_STEP_DEGREES, config.roaming_radius * STEP_RADIUS_FRACTION)


def jitter_cap(config: AgentConfig) -> float:
    return min(REST_JITTER_DEGREES, config.roaming_radius * JITTER_RADIUS_FRACTION)


def max_tick_displacement(config: AgentConfig) -> float:
    """Largest distance (degrees) an agent can cover in one tick."""
    return max(step_cap(config), jitter_cap(config) * math.sqrt(2))


def distance_degrees(a: GeoPoint, b: GeoPoint) -> float:
    return math.hypot(a.lat - b.lat, a.lng - b.lng)


def bearing_degrees(origin: GeoPoint, target: GeoPoint) -> float:
    """Heading from ``origin`` toward ``target``, clockwise from north."""
    return _normalize_heading(
        math.degrees(math.atan2(target.lng - origin.lng, target.lat - origin.lat))
    )


def _normalize_heading(heading: float) -> float:
    heading = heading % 360.0
    # Tiny negative inputs round up to exactly 360.0
    return 0.0 if heading >= 360.0 else heading


def _apply_geofence(
    config: AgentConfig, candidate: GeoPoint, heading: float
) -> Tuple[GeoPoint, float]:
    """Pull an out-of-territory position back toward the anchor."""
    anchor = config.anchor
    if distance_degrees(candidate, anchor) <= config.roaming_radius:
        return candidate, heading

    heading = bearing_degrees(candidate, anchor)
    pulled = GeoPoint(
        lat=candidate.lat + (anchor.lat - candidate.lat) * GEOFENCE_PULL_FRACTION,
        lng=candidate.lng + (anchor.lng - candidate.lng) * GEOFENCE_PULL_FRACTION,
    )
    return pulled, heading


def advance(
    config: AgentConfig,
    state: AgentRuntimeState,
    tod: TimeOfDay,
    *,
    rng: random.Random,
    tick_seconds: float,
) -> Tuple[AgentRuntimeState, MovementInfo]:
    """Advance one agent by one tick.

    Args:
        config: Static agent configuration
        state: The agent's state after the previous tick (not modified)
        tod: Time-of-day bucket for this tick
        rng: Random source for this run
        tick_seconds: Simulated duration of a tick, used to report speed in km/h

    Returns:
        Tuple of (new runtime state, movement info for the reading)
    """
    params = behavior_for(config, tod)

    resting = state.is_resting
    rest_ticks = state.rest_ticks_remaining
    if not resting and rng.random() < params.rest_probability:
        resting = True
        rest_ticks = rng.randint(*REST_TICKS_RANGE)

    if resting:
        amplitude = jitter_cap(config)
        candidate = GeoPoint(
            lat=state.position.lat + rng.uniform(-amplitude, amplitude),
            lng=state.position.lng + rng.uniform(-amplitude, amplitude),
        )
        position, heading = _apply_geofence(config, candidate, state.heading_degrees)

        rest_ticks -= 1
        new_state = AgentRuntimeState(
            position=position,
            heading_degrees=heading,
            is_resting=rest_ticks > 0,
            rest_ticks_remaining=max(0, rest_ticks),
            battery_charge=state.battery_charge,
        )
        return new_state, MovementInfo(speed=0.0, is_resting=True, time_of_day=tod)

    heading = _normalize_heading(
        state.heading_degrees + rng.uniform(-MAX_TURN_DEGREES, MAX_TURN_DEGREES)
    )
    step = min(BASE_STEP_DEGREES * params.speed_factor * params.activity, step_cap(config))
    radians = math.radians(heading)
    candidate = GeoPoint(
        lat=state.position.lat + step * math.cos(radians),
        lng=state.position.lng + step * math.sin(radians),
    )
    position, heading = _apply_geofence(config, candidate, heading)

    # Report what the agent actually covered, including any geofence pull
    displacement_km = distance_degrees(state.position, position) * KM_PER_DEGREE
    speed = displacement_km / (tick_seconds / 3600.0) if tick_seconds > 0 else 0.0

    new_state = AgentRuntimeState(
        position=position,
        heading_degrees=heading,
        is_resting=False,
        rest_ticks_remaining=0,
        battery_charge=state.battery_charge,
    )
    return new_state, MovementInfo(speed=speed, is_resting=False, time_of_day=tod)
