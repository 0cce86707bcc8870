"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest

from wildsim.config import ConfigurationError, SimulatorConfig


def test_defaults_when_environment_is_empty():
    config = SimulatorConfig.from_env({})

    assert config.ingest_url == "http://localhost:5000/api/iot/data"
    assert config.tick_interval_seconds == 3.0
    assert config.max_iterations is None
    assert config.request_timeout_seconds == 5.0
    assert config.max_delivery_attempts == 3
    assert config.retry_delay_seconds == 1.0
    assert config.roster_path is None
    assert config.seed is None


def test_values_are_parsed_from_environment():
    config = SimulatorConfig.from_env(
        {
            "API_URL": "https://ingest.example.org/api/",
            "INGEST_PATH": "telemetry",
            "TICK_INTERVAL_SECONDS": "0.5",
            "MAX_ITERATIONS": "100",
            "ROSTER_PATH": "rosters/park.json",
            "SIMULATION_SEED": "7",
            "TIME_SCALE": "60",
        }
    )

    assert config.ingest_url == "https://ingest.example.org/api/telemetry"
    assert config.tick_interval_seconds == 0.5
    assert config.max_iterations == 100
    assert config.roster_path == Path("rosters/park.json")
    assert config.seed == 7
    assert config.simulated_tick_seconds == 30.0


def test_blank_values_fall_back_to_defaults():
    config = SimulatorConfig.from_env({"MAX_ITERATIONS": "", "ROSTER_PATH": "  "})
    assert config.max_iterations is None
    assert config.roster_path is None


@pytest.mark.parametrize(
    "env",
    [
        {"TICK_INTERVAL_SECONDS": "fast"},
        {"TICK_INTERVAL_SECONDS": "0"},
        {"MAX_ITERATIONS": "ten"},
        {"MAX_ITERATIONS": "0"},
        {"API_URL": "localhost:5000"},
        {"MAX_DELIVERY_ATTEMPTS": "0"},
        {"RETRY_DELAY_SECONDS": "-1"},
        {"TIME_SCALE": "0"},
    ],
)
def test_invalid_settings_raise_configuration_error(env):
    with pytest.raises(ConfigurationError):
        SimulatorConfig.from_env(env)


def test_overrides_skip_none_and_revalidate():
    config = SimulatorConfig.from_env({})

    updated = config.with_overrides(max_iterations=5, seed=None)
    assert updated.max_iterations == 5
    assert updated.seed is None

    with pytest.raises(ConfigurationError):
        config.with_overrides(tick_interval_seconds=-3.0)


def test_display_lists_key_settings():
    text = SimulatorConfig.from_env({"MAX_ITERATIONS": "12"}).display()
    assert "http://localhost:5000/api/iot/data" in text
    assert "Max Iterations: 12" in text
    assert "Roster: built-in" in text


@pytest.mark.parametrize(
    "env",
    [
        {"API_URL": "http://ingést.example.org/api"},
        {"INGEST_PATH": "/iot/données"},
    ],
)
def test_non_ascii_ingest_url_is_configuration_error(env):
    with pytest.raises(ConfigurationError, match="ASCII"):
        SimulatorConfig.from_env(env)


def test_percent_encoded_ingest_path_is_accepted():
    config = SimulatorConfig.from_env({"INGEST_PATH": "/iot/donn%C3%A9es"})
    assert config.ingest_url == "http://localhost:5000/api/iot/donn%C3%A9es"
