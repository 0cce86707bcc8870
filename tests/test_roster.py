"""Tests for roster loading via RosterLoader."""

import json
from pathlib import Path

import pytest

from wildsim.config import ConfigurationError
from wildsim.roster import DEFAULT_ROSTER, RosterLoader, load_roster
from wildsim.schemas import BehaviorProfile, DeviceType

EXAMPLE_ROSTER = Path(__file__).resolve().parent.parent / "examples" / "rosters" / "nairobi_park.json"


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps(data))
    return path


def _entry(**overrides):
    entry = {
        "id": "GPS_COLLAR_001",
        "device_type": "GPS Collar",
        "anchor": {"lat": -1.373, "lng": 36.852},
        "roaming_radius": 0.03,
        "behavior_profile": "grazer",
    }
    entry.update(overrides)
    return entry


def test_example_roster_matches_built_in_fleet():
    agents = RosterLoader().load(EXAMPLE_ROSTER)

    assert [agent.id for agent in agents] == [agent.id for agent in DEFAULT_ROSTER]
    collar = agents[0]
    assert collar.device_type is DeviceType.GPS_COLLAR
    assert collar.behavior_profile is BehaviorProfile.GRAZER
    assert collar.species_id is None
    weather = next(agent for agent in agents if agent.device_type is DeviceType.WEATHER_STATION)
    assert weather.roaming_radius == 0.0
    assert weather.anchor_altitude == 1780.0


def test_behavior_profile_defaults_to_none(tmp_path):
    entry = _entry()
    del entry["behavior_profile"]
    agents = RosterLoader().load(_write(tmp_path, {"agents": [entry]}))
    assert agents[0].behavior_profile is BehaviorProfile.NONE


def test_load_roster_without_path_returns_default_fleet():
    agents = load_roster(None)
    assert len(agents) == 6
    assert agents is not DEFAULT_ROSTER


def test_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        RosterLoader().load(tmp_path / "absent.json")


def test_invalid_json_is_configuration_error(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        RosterLoader().load(path)


@pytest.mark.parametrize(
    "data,message",
    [
        ([], "JSON object"),
        ({}, "'agents' list"),
        ({"agents": []}, "at least one agent"),
    ],
)
def test_malformed_roster_structure(tmp_path, data, message):
    with pytest.raises(ConfigurationError, match=message):
        RosterLoader().load(_write(tmp_path, data))


@pytest.mark.parametrize(
    "override",
    [
        {"device_type": "Drone"},
        {"behavior_profile": "scavenger"},
        {"roaming_radius": -0.1},
        {"anchor": {"lat": 120.0, "lng": 0.0}},
        {"id": ""},
    ],
)
def test_invalid_agent_entries_are_rejected(tmp_path, override):
    with pytest.raises(ConfigurationError, match="agent #0 is invalid"):
        RosterLoader().load(_write(tmp_path, {"agents": [_entry(**override)]}))


def test_duplicate_ids_are_rejected(tmp_path):
    data = {"agents": [_entry(), _entry(roaming_radius=0.01)]}
    with pytest.raises(ConfigurationError, match="duplicate agent id 'GPS_COLLAR_001'"):
        RosterLoader().load(_write(tmp_path, data))
