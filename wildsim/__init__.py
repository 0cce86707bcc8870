"""
wildsim - synthetic wildlife-tracking telemetry generator.

Simulates a fleet of virtual field devices (GPS collars, camera traps, motion
sensors, weather stations) and streams their readings to an ingestion API to
exercise it under realistic load.

No global state. The roster, random source, clock and delivery client are
all injected into the Orchestrator.
"""

__version__ = "0.1.0"

# Main simulation components
from .orchestrator import Orchestrator, SchedulerState
from .delivery import (
    DeliveryClient,
    DeliveryError,
    EndpointUnreachableError,
    TransientDeliveryError,
    DeliveryRejectedError,
)

# Simulation models
from .movement import advance, time_of_day, max_tick_displacement
from .environment import update_environment, initial_environment
from .battery import drain_battery
from .readings import synthesize_reading
from .clock import SimulatedClock, wall_clock

# Configuration
from .config import SimulatorConfig, ConfigurationError
from .roster import RosterLoader, load_roster, DEFAULT_ROSTER

# Core schemas
from .schemas import (
    AgentConfig,
    AgentRuntimeState,
    BehaviorProfile,
    DeliveryOutcome,
    DeliveryStatus,
    DeviceType,
    EnvironmentState,
    FailureKind,
    GeoPoint,
    MovementInfo,
    Reading,
    RunSummary,
    TimeOfDay,
)

__all__ = [
    # Main class
    "Orchestrator",
    "SchedulerState",
    # Delivery
    "DeliveryClient",
    "DeliveryError",
    "EndpointUnreachableError",
    "TransientDeliveryError",
    "DeliveryRejectedError",
    # Simulation models
    "advance",
    "time_of_day",
    "max_tick_displacement",
    "update_environment",
    "initial_environment",
    "drain_battery",
    "synthesize_reading",
    "SimulatedClock",
    "wall_clock",
    # Configuration
    "SimulatorConfig",
    "ConfigurationError",
    "RosterLoader",
    "load_roster",
    "DEFAULT_ROSTER",
    # Schemas
    "AgentConfig",
    "AgentRuntimeState",
    "BehaviorProfile",
    "DeliveryOutcome",
    "DeliveryStatus",
    "DeviceType",
    "EnvironmentState",
    "FailureKind",
    "GeoPoint",
    "MovementInfo",
    "Reading",
    "RunSummary",
    "TimeOfDay",
]
