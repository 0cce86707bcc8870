"""
Agent roster loading for JSON-defined device fleets.

A roster lists the virtual devices a run simulates. It is read once at startup
and validated completely before the scheduler starts. Any problem is a
ConfigurationError, the only fatal condition in wildsim.

Roster file structure:
```json
{
  "name": "Nairobi National Park",
  "agents": [
    {
      "id": "GPS_COLLAR_001",
      "device_type": "GPS Collar",
      "anchor": {"lat": -1.3730, "lng": 36.8520},
      "roaming_radius": 0.03,
      "behavior_profile": "grazer",
      "species_id": null
    }
  ]
}
```

Usage:
    loader = RosterLoader()
    agents = loader.load(Path("examples/rosters/nairobi_park.json"))
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .config import ConfigurationError
from .schemas import AgentConfig, BehaviorProfile, DeviceType, GeoPoint


# Built-in fleet around Nairobi National Park
DEFAULT_ROSTER: List[AgentConfig] = [
    AgentConfig(
        id="GPS_COLLAR_001",
        device_type=DeviceType.GPS_COLLAR,
        anchor=GeoPoint(lat=-1.3730, lng=36.8520),  # Central Plains
        roaming_radius=0.03,
        behavior_profile=BehaviorProfile.GRAZER,
    ),
    AgentConfig(
        id="GPS_COLLAR_002",
        device_type=DeviceType.GPS_COLLAR,
        anchor=GeoPoint(lat=-1.4150, lng=36.9120),  # Near Athi Basin
        roaming_radius=0.04,
        behavior_profile=BehaviorProfile.PREDATOR,
    ),
    AgentConfig(
        id="CAMERA_TRAP_001",
        device_type=DeviceType.CAMERA_TRAP,
        anchor=GeoPoint(lat=-1.3550, lng=36.7650),  # Forest edge (West)
        roaming_radius=0.000015,  # ~1.7 m of mount jitter
    ),
    AgentConfig(
        id="MOTION_SENSOR_001",
        device_type=DeviceType.MOTION_SENSOR,
        anchor=GeoPoint(lat=-1.3900, lng=36.8300),  # Near a hippo pool
        roaming_radius=0.00001,
    ),
    AgentConfig(
        id="WEATHER_STATION_001",
        device_type=DeviceType.WEATHER_STATION,
        anchor=GeoPoint(lat=-1.3350, lng=36.8650),  # Near East Gate
        roaming_radius=0.0,
    ),
    AgentConfig(
        id="GPS_COLLAR_003",
        device_type=DeviceType.GPS_COLLAR,
        anchor=GeoPoint(lat=-1.4450, lng=36.8850),  # Southern border
        roaming_radius=0.05,
        behavior_profile=BehaviorProfile.HERD,
    ),
]


class RosterLoader:
    """Load and validate agent rosters from JSON files.

    Validation:
    - Top level must be an object with a non-empty "agents" list
    - Each agent must satisfy the AgentConfig schema (device type, anchor,
      non-negative roaming radius, known behaviour profile)
    - Agent ids must be unique
    """

    def load(self, path: Path) -> List[AgentConfig]:
        """Load a roster file.

        Args:
            path: Path to the roster JSON file

        Returns:
            List of AgentConfig in file order

        Raises:
            ConfigurationError: If the file is missing, unreadable, not JSON,
                or describes an invalid roster
        """
        if not path.exists():
            raise ConfigurationError(f"Roster file not found at {path}")

        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Roster {path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise ConfigurationError(f"Could not read roster {path}: {exc}") from exc

        return self.parse(data, source=str(path))

    def parse(self, data: Any, *, source: str = "<roster>") -> List[AgentConfig]:
        """Validate already-decoded roster data."""
        self._validate_roster(data, source)

        agents: List[AgentConfig] = []
        seen: Dict[str, int] = {}
        for index, entry in enumerate(data["agents"]):
            try:
                agent = AgentConfig.model_validate(entry)
            except ValidationError as exc:
                raise ConfigurationError(
                    f"{source}: agent #{index} is invalid:\n{exc}"
                ) from exc

            if agent.id in seen:
                raise ConfigurationError(
                    f"{source}: duplicate agent id '{agent.id}' "
                    f"(entries #{seen[agent.id]} and #{index})"
                )
            seen[agent.id] = index
            agents.append(agent)

        return agents

    def _validate_roster(self, data: Any, source: str) -> None:
        if not isinstance(data, dict):
            raise ConfigurationError(f"{source}: roster must be a JSON object")

        agents = data.get("agents")
        if not isinstance(agents, list):
            raise ConfigurationError(f"{source}: roster missing required 'agents' list")

        if not agents:
            raise ConfigurationError(f"{source}: roster must have at least one agent")


def load_roster(path: Optional[Path] = None) -> List[AgentConfig]:
    """Load a roster file, or return the built-in fleet when no path is given."""
    if path is None:
        return list(DEFAULT_ROSTER)
    return RosterLoader().load(path)
