"""Tests for the command-line wiring."""

import json
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest

from wildsim import cli
from wildsim.clock import SimulatedClock

REPO_ROOT = Path(__file__).resolve().parent.parent


def _clear_env(monkeypatch):
    for name in (
        "API_URL",
        "INGEST_PATH",
        "TICK_INTERVAL_SECONDS",
        "MAX_ITERATIONS",
        "ROSTER_PATH",
        "SIMULATION_SEED",
        "TIME_SCALE",
        "STARTUP_DELAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_flags_override_environment(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("MAX_ITERATIONS", "50")
    args = cli.build_parser().parse_args(["--iterations", "3", "--api-url", "http://sink.test/api"])

    config = cli.load_config(args)

    assert config.max_iterations == 3
    assert config.ingest_url == "http://sink.test/api/iot/data"


def test_fast_mode_uses_simulated_clock_without_pacing(monkeypatch):
    _clear_env(monkeypatch)
    args = cli.build_parser().parse_args(["--fast", "--seed", "5"])
    config = cli.load_config(args)

    orchestrator = cli.build_orchestrator(config, fast=True)

    assert isinstance(orchestrator.clock, SimulatedClock)
    assert orchestrator.pace is False
    assert orchestrator.startup_delay_seconds == 0.0
    assert len(orchestrator.agents) == 6


def test_bad_roster_exits_with_configuration_status(monkeypatch, tmp_path, capsys):
    _clear_env(monkeypatch)
    roster = tmp_path / "roster.json"
    roster.write_text(json.dumps({"agents": []}))

    status = cli.main(["--roster", str(roster)])

    assert status == cli.EXIT_CONFIG_ERROR
    assert "Configuration error" in capsys.readouterr().out


def test_main_runs_to_ceiling_against_refusing_endpoint(monkeypatch, capsys):
    _clear_env(monkeypatch)
    calls = []

    def refuse(url, payload, timeout):
        calls.append(payload["sensorId"])
        raise ConnectionRefusedError(111, "Connection refused")

    monkeypatch.setattr("wildsim.delivery._perform_post", refuse)

    status = cli.main(["--fast", "--iterations", "2", "--seed", "1"])

    assert status == cli.EXIT_OK
    assert len(calls) == 2 * 6
    out = capsys.readouterr().out
    assert "SIMULATION COMPLETE" in out
    assert "Success rate: 0.0%" in out


def test_explicit_startup_delay_survives_fast_mode(monkeypatch):
    _clear_env(monkeypatch)
    args = cli.build_parser().parse_args(["--fast", "--startup-delay", "1.5"])

    orchestrator = cli.build_orchestrator(cli.load_config(args), fast=True)

    assert orchestrator.startup_delay_seconds == 1.5


SLOW_ENDPOINT_SCRIPT = """
import sys
import time

import wildsim.delivery
from wildsim import cli


def slow_post(url, payload, timeout):
    print("in-flight", flush=True)
    time.sleep(5)
    return 201


wildsim.delivery._perform_post = slow_post
sys.exit(cli.main(["--fast", "--iterations", "3"]))
"""


@pytest.mark.skipif(sys.platform == "win32", reason="SIGINT delivery is POSIX only")
def test_interrupt_exits_without_waiting_for_in_flight_deliveries():
    env = dict(os.environ, WILDSIM_NO_COLOR="1", PYTHONUNBUFFERED="1")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    proc = subprocess.Popen(
        [sys.executable, "-c", SLOW_ENDPOINT_SCRIPT],
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        env=env,
        cwd=REPO_ROOT,
    )
    try:
        for line in proc.stdout:
            if line.strip() == "in-flight":
                break
        interrupted = time.monotonic()
        proc.send_signal(signal.SIGINT)
        out, _ = proc.communicate(timeout=10)
        elapsed = time.monotonic() - interrupted
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    assert proc.returncode == cli.EXIT_INTERRUPTED
    assert "Simulation stopped by user" in out
    assert elapsed < 2.0
