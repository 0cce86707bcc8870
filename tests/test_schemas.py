"""Unit tests for the core schema building blocks."""

import pytest
from pydantic import ValidationError

from wildsim.schemas import (
    AgentConfig,
    AgentRuntimeState,
    DeliveryOutcome,
    DeliveryStatus,
    DeviceType,
    EnvironmentState,
    GeoPoint,
    Reading,
    RunSummary,
)


def test_device_type_values_match_ingestion_labels():
    assert [device.value for device in DeviceType] == [
        "GPS Collar",
        "Camera Trap",
        "Motion Sensor",
        "Weather Station",
    ]
    assert not DeviceType.GPS_COLLAR.is_fixed_location
    assert DeviceType.CAMERA_TRAP.is_fixed_location


def test_agent_config_is_frozen():
    config = AgentConfig(
        id="A",
        device_type="GPS Collar",
        anchor={"lat": 0.0, "lng": 0.0},
        roaming_radius=0.01,
    )
    with pytest.raises(ValidationError):
        config.roaming_radius = 1.0


def test_runtime_state_rejects_battery_outside_bounds():
    with pytest.raises(ValidationError):
        AgentRuntimeState(position=GeoPoint(lat=0, lng=0), battery_charge=4.0)
    with pytest.raises(ValidationError):
        AgentRuntimeState(position=GeoPoint(lat=0, lng=0), battery_charge=101.0)


def test_environment_state_enforces_clamps():
    with pytest.raises(ValidationError):
        EnvironmentState(humidity=95.0)
    with pytest.raises(ValidationError):
        EnvironmentState(wind_speed=-1.0)


def test_reading_payload_uses_wire_names_and_drops_unused_fields():
    reading = Reading(
        sensor_id="MOTION_SENSOR_001",
        device_type=DeviceType.MOTION_SENSOR,
        latitude=-1.39,
        longitude=36.83,
        timestamp="2025-03-01T12:00:00.000Z",
        motion=False,
        battery_level=64,
        signal_strength=81.5,
    )

    assert reading.to_payload() == {
        "sensorId": "MOTION_SENSOR_001",
        "deviceType": "Motion Sensor",
        "speciesId": None,
        "latitude": -1.39,
        "longitude": 36.83,
        "timestamp": "2025-03-01T12:00:00.000Z",
        "motion": False,
        "batteryLevel": 64,
        "signalStrength": 81.5,
    }


def test_delivery_outcome_success_flag():
    ok = DeliveryOutcome(sensor_id="A", status=DeliveryStatus.SUCCESS, attempts=1)
    failed = DeliveryOutcome(sensor_id="A", status=DeliveryStatus.EXHAUSTED, attempts=3)
    assert ok.succeeded
    assert not failed.succeeded


def test_run_summary_success_rate():
    assert RunSummary().success_rate == 0.0
    summary = RunSummary(iterations=2, sent=3, failed=1)
    assert summary.total == 4
    assert summary.success_rate == 75.0
