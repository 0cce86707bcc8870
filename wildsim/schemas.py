"""
Pydantic schemas for the wildsim telemetry generator.

All data structures shared between the simulation components are defined here.

Design Philosophy:
- Static agent configuration is frozen (loaded once, never mutated)
- Mutable runtime state lives in explicit records owned by the orchestrator
- Readings carry camelCase wire names so they serialize straight into the
  ingestion API's JSON body
- Pydantic validation rejects malformed rosters before a run starts
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enumerations
# ============================================================================

class DeviceType(str, Enum):
    """Kinds of virtual devices. Values are the ingestion API's labels."""

    GPS_COLLAR = "GPS Collar"
    CAMERA_TRAP = "Camera Trap"
    MOTION_SENSOR = "Motion Sensor"
    WEATHER_STATION = "Weather Station"

    @property
    def is_fixed_location(self) -> bool:
        return self is not DeviceType.GPS_COLLAR


class BehaviorProfile(str, Enum):
    """Named activity patterns used to look up rest/speed parameters."""

    PREDATOR = "predator"
    GRAZER = "grazer"
    HERD = "herd"
    BROWSER = "browser"
    NONE = "none"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class DeliveryStatus(str, Enum):
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class FailureKind(str, Enum):
    """Why a delivery ended without success."""

    REFUSED = "refused"        # Endpoint unreachable, never retried
    TRANSIENT = "transient"    # Timeout, 5xx, network error after all retries
    REJECTED = "rejected"      # Non-5xx HTTP error status, never retried


# ============================================================================
# Agent Schemas
# ============================================================================

class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AgentConfig(BaseModel):
    """Static configuration of one virtual device.

    Loaded once at startup from the roster and shared read-only for the
    lifetime of the process. ``species_id`` is passed through to readings
    without being examined.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Sensor identifier sent as sensorId")
    device_type: DeviceType = Field(..., description="Device kind")
    anchor: GeoPoint = Field(..., description="Centre of the agent's territory")
    # Degrees of lat/lng. Fixed devices use a near-zero radius so the movement
    # model degenerates to tiny jitter around the mounting point.
    roaming_radius: float = Field(..., ge=0, description="Territory radius in degrees")
    behavior_profile: BehaviorProfile = Field(
        BehaviorProfile.NONE, description="Activity pattern used by the movement model"
    )
    species_id: Optional[str] = Field(None, description="Opaque species reference")
    anchor_altitude: float = Field(1700.0, description="Elevation at the anchor in metres")


class AgentRuntimeState(BaseModel):
    """Mutable per-agent state carried from one tick to the next.

    Only the owning agent's own step ever reads or replaces this record, so no
    locking is needed even though agents run concurrently within a tick.
    """

    position: GeoPoint
    heading_degrees: float = Field(0.0, ge=0, lt=360)
    is_resting: bool = False
    rest_ticks_remaining: int = Field(0, ge=0)
    battery_charge: float = Field(..., ge=5, le=100)


class MovementInfo(BaseModel):
    """Per-tick movement facts the reading synthesizer needs."""

    model_config = ConfigDict(frozen=True)

    speed: float = Field(0.0, ge=0, description="km/h derived from actual displacement")
    is_resting: bool = False
    time_of_day: TimeOfDay


# ============================================================================
# Environment Schema
# ============================================================================

class EnvironmentState(BaseModel):
    """Shared weather conditions read by every agent.

    Written only by the orchestrator, at most once per tick and before any
    agent reads it.
    """

    base_temperature: float = Field(25.0, ge=15, le=35, description="°C")
    humidity: float = Field(60.0, ge=20, le=90, description="%")
    wind_speed: float = Field(5.0, ge=0, le=25, description="m/s")
    rainfall: float = Field(0.0, ge=0, description="mm")
    last_update: Optional[datetime] = Field(None, description="When conditions last drifted")


# ============================================================================
# Wire Schemas
# ============================================================================

class Reading(BaseModel):
    """One synthesized telemetry payload (one agent, one tick).

    Device-specific fields stay None when they do not apply; ``to_payload``
    drops them so each device type emits only its own field contract.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sensor_id: str = Field(..., alias="sensorId")
    device_type: DeviceType = Field(..., alias="deviceType")
    species_id: Optional[str] = Field(None, alias="speciesId")
    latitude: float
    longitude: float
    timestamp: str

    temperature: Optional[float] = None
    battery_level: Optional[int] = Field(None, alias="batteryLevel")
    heartbeat: Optional[int] = None
    altitude: Optional[float] = None
    speed: Optional[float] = None
    motion: Optional[bool] = None
    images_captured: Optional[int] = Field(None, alias="imagesCaptured")
    signal_strength: Optional[float] = Field(None, alias="signalStrength")
    metadata: Optional[Dict[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON body expected by the ingestion endpoint."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        # speciesId is part of the base contract even when unset
        payload["speciesId"] = self.species_id
        return payload


class DeliveryOutcome(BaseModel):
    """Terminal result of delivering one reading."""

    model_config = ConfigDict(frozen=True)

    sensor_id: str
    status: DeliveryStatus
    attempts: int = Field(..., ge=1)
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is DeliveryStatus.SUCCESS


class RunSummary(BaseModel):
    """Aggregate counters reported when a run terminates."""

    iterations: int = 0
    sent: int = 0
    failed: int = 0
    attempts: int = 0
    stopped_early: bool = False

    @property
    def total(self) -> int:
        return self.sent + self.failed

    @property
    def success_rate(self) -> float:
        """Percentage of readings delivered (0 when nothing was attempted)."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.sent / self.total
