"""
Main simulation orchestrator.

Drives the fixed-interval tick loop for a fleet of virtual devices:
1. Read the clock once (the tick's simulated instant)
2. Drift the shared environment (at most once per tick, before agents read it)
3. Fan out one task per agent: movement -> battery -> reading -> delivery
4. Join every task at the tick barrier
5. Fold outcomes into the running counters and notify tick listeners

Ticks never overlap. Tick N+1 starts only after every delivery of tick N has
resolved, which is the only backpressure in the system.
"""

import asyncio
import random
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .battery import drain_battery, initial_charge
from .clock import Clock, wall_clock
from .delivery import DeliveryClient
from .environment import initial_environment, update_environment
from .logging_utils import (
    BANNER_RULE,
    LOG_TAG_DETERMINISTIC,
    LOG_TAG_ERROR,
    LOG_TAG_INFO,
    log_deterministic,
    log_error,
    log_info,
)
from .movement import advance, time_of_day
from .readings import synthesize_reading
from .schemas import (
    AgentConfig,
    AgentRuntimeState,
    DeliveryOutcome,
    EnvironmentState,
    Reading,
    RunSummary,
    TimeOfDay,
)

TickListener = Callable[[int, List[Reading], List[DeliveryOutcome]], None]


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Orchestrator:
    """
    Fixed-interval scheduler for the telemetry fleet.

    Owns every piece of mutable simulation state: the per-agent runtime
    records (keyed by agent id) and the shared EnvironmentState. Agents never
    touch each other's records, and only the orchestrator writes the
    environment.
    """

    def __init__(
        self,
        agents: Sequence[AgentConfig],
        delivery: DeliveryClient,
        *,
        tick_interval_seconds: float = 3.0,
        simulated_tick_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        environment: Optional[EnvironmentState] = None,
        pace: bool = True,
        startup_delay_seconds: float = 0.0,
        tick_listeners: Optional[List[TickListener]] = None,
    ):
        """Initialize orchestrator with all dependencies injected.

        Args:
            agents: Agent roster (ids must be unique)
            delivery: Client used to ship every reading
            tick_interval_seconds: Wall-clock spacing between tick starts
            simulated_tick_seconds: Simulated length of a tick for speed
                reporting; defaults to tick_interval_seconds
            rng: Random source for the whole run (seed it for replay)
            clock: Callable returning the tick's instant; defaults to local wall time
            environment: Initial shared environment
            pace: When False, ticks run back to back without waiting out the interval
            startup_delay_seconds: Pause before the first tick
            tick_listeners: Optional callables invoked after each tick with
                (tick, readings, outcomes). Failures are logged, not raised.
        """
        self.agents: Dict[str, AgentConfig] = {agent.id: agent for agent in agents}
        self.delivery = delivery
        self.tick_interval_seconds = tick_interval_seconds
        self.simulated_tick_seconds = simulated_tick_seconds or tick_interval_seconds
        self.rng = rng or random.Random()
        self.clock = clock or wall_clock
        self.environment = environment or initial_environment()
        self.pace = pace
        self.startup_delay_seconds = startup_delay_seconds
        self.tick_listeners = tick_listeners or []

        # Runtime records are created lazily on an agent's first tick
        self.agent_states: Dict[str, AgentRuntimeState] = {}

        self.state = SchedulerState.IDLE
        self.summary = RunSummary()
        self._stop_requested = False

    def stop(self) -> None:
        """Ask the loop to stop once the current tick barrier resolves."""
        self._stop_requested = True

    def _runtime_state(self, config: AgentConfig) -> AgentRuntimeState:
        state = self.agent_states.get(config.id)
        if state is None:
            state = AgentRuntimeState(
                position=config.anchor,
                heading_degrees=self.rng.uniform(0.0, 360.0) % 360.0,
                battery_charge=initial_charge(self.rng),
            )
            self.agent_states[config.id] = state
        return state

    def _print_banner(self, max_iterations: Optional[int]) -> None:
        ceiling = max_iterations if max_iterations is not None else "unbounded"
        log_info(BANNER_RULE)
        log_info("  IoT SENSOR SIMULATION SERVICE")
        log_info(BANNER_RULE)
        log_info(f"  API Endpoint: {self.delivery.url}")
        log_info(f"  Active Sensors: {len(self.agents)}")
        log_info(f"  Interval: {self.tick_interval_seconds:g}s")
        log_info(f"  Max Iterations: {ceiling}")
        log_info(BANNER_RULE + "\n")

    def _print_summary(self) -> None:
        summary = self.summary
        title = "SIMULATION STOPPED" if summary.stopped_early else "SIMULATION COMPLETE"
        log_info("\n" + BANNER_RULE)
        log_info(f"  {title}")
        log_info(f"  Iterations: {summary.iterations}")
        log_info(f"  Total data points sent: {summary.sent}")
        log_info(f"  Failed: {summary.failed}")
        log_info(f"  Success rate: {summary.success_rate:.1f}%")
        log_info(BANNER_RULE + "\n")

    async def run(self, max_iterations: Optional[int] = None) -> RunSummary:
        """Run ticks until the iteration ceiling (if any) or a stop request.

        Args:
            max_iterations: Optional iteration ceiling; None runs until stopped
                or cancelled

        Returns:
            RunSummary with iteration, sent and failed totals

        Cancellation (operator interrupt) propagates immediately; in-flight
        deliveries are abandoned, not drained.
        """
        if not self.agents:
            raise ValueError("Orchestrator needs at least one agent")

        self.state = SchedulerState.RUNNING
        self._print_banner(max_iterations)

        try:
            if self.startup_delay_seconds > 0:
                print(f"Starting sensor simulation in {self.startup_delay_seconds:g} seconds...\n")
                await asyncio.sleep(self.startup_delay_seconds)

            loop = asyncio.get_running_loop()
            tick = 0
            while max_iterations is None or tick < max_iterations:
                if self._stop_requested:
                    self.summary.stopped_early = True
                    break

                tick += 1
                started = loop.time()
                await self._run_tick(tick, max_iterations)

                if max_iterations is not None and tick >= max_iterations:
                    break

                # Fixed-rate pacing: wait out the rest of the interval. A tick
                # that overran its interval is followed immediately.
                if self.pace:
                    remaining = self.tick_interval_seconds - (loop.time() - started)
                    if remaining > 0:
                        await asyncio.sleep(remaining)
        finally:
            self.state = SchedulerState.STOPPED

        self._print_summary()
        return self.summary

    async def _run_tick(self, tick: int, max_iterations: Optional[int]) -> None:
        """Execute a single tick, returning only after the tick barrier."""
        ceiling = max_iterations if max_iterations is not None else "∞"
        log_info(f"\n--- Iteration {tick}/{ceiling} ---")

        now = self.clock()
        tod = time_of_day(now.hour)

        # Single writer: environment drifts here, before any agent reads it
        self.environment = update_environment(self.environment, now, self.rng)
        environment = self.environment

        # Fan out. All synchronous simulation work for an agent runs before its
        # first await, in roster order, so a seeded run is reproducible.
        tasks = [
            self._run_agent(config, now, tod, environment)
            for config in self.agents.values()
        ]
        results: List[Tuple[Reading, DeliveryOutcome]] = await asyncio.gather(*tasks)

        readings = [reading for reading, _ in results]
        outcomes = [outcome for _, outcome in results]

        self.summary.iterations = tick
        for outcome in outcomes:
            self.summary.attempts += outcome.attempts
            if outcome.succeeded:
                self.summary.sent += 1
            else:
                self.summary.failed += 1

        delivered = sum(outcome.succeeded for outcome in outcomes)
        log_info(f"  {LOG_TAG_INFO} Tick {tick}: {delivered}/{len(outcomes)} delivered")

        for listener in self.tick_listeners:
            try:
                listener(tick, readings, outcomes)
            except Exception as exc:
                log_error(f"  {LOG_TAG_ERROR} [Listener] failed: {exc}")

    async def _run_agent(
        self,
        config: AgentConfig,
        now: datetime,
        tod: TimeOfDay,
        environment: EnvironmentState,
    ) -> Tuple[Reading, DeliveryOutcome]:
        """One agent's chain for one tick: movement, battery, reading, delivery."""
        state = self._runtime_state(config)

        state, movement = advance(
            config,
            state,
            tod,
            rng=self.rng,
            tick_seconds=self.simulated_tick_seconds,
        )
        state = state.model_copy(
            update={"battery_charge": drain_battery(state.battery_charge, config.device_type)}
        )
        self.agent_states[config.id] = state

        reading = synthesize_reading(config, state, movement, environment, now, self.rng)
        if movement.is_resting:
            log_deterministic(f"  {LOG_TAG_DETERMINISTIC} [{config.id}] resting")

        outcome = await self.delivery.deliver(reading)
        return reading, outcome
