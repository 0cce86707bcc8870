"""Logging utilities for wildsim runs.

Provides color-coded status lines so delivery outcomes stand out from the
deterministic simulation chatter when a run streams to a terminal.
"""

import os
from datetime import datetime, timezone
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for line types
    BLUE = "\033[94m"      # Deterministic simulation steps
    YELLOW = "\033[93m"    # Retry notices
    RED = "\033[91m"       # Delivery failures
    GREEN = "\033[92m"     # Delivery success
    CYAN = "\033[96m"      # Banners, summaries

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if WILDSIM_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("WILDSIM_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def log_deterministic(message: str) -> None:
    """Log a deterministic simulation step (blue)."""
    print(colored(message, Color.BLUE))


def log_retry(message: str) -> None:
    """Log a retry notice (yellow)."""
    print(colored(message, Color.YELLOW))


def log_error(message: str) -> None:
    """Log a failure (red)."""
    print(colored(message, Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(message, Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(message, Color.CYAN))


def utc_stamp() -> str:
    """Current UTC time as an ISO-8601 string for status lines."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sensor_line(tag: str, sensor_id: str, message: str) -> str:
    """Format a per-sensor delivery status line: ``[tag] [stamp] id - message``."""
    return f"{tag} [{utc_stamp()}] {sensor_id} - {message}"


# Markers for line types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"  # Simulation step
LOG_TAG_RETRY = "[~]"          # Retry scheduled
LOG_TAG_ERROR = "[!]"          # Failure
LOG_TAG_SUCCESS = "[✓]"        # Success
LOG_TAG_INFO = "[i]"           # Information

BANNER_RULE = "═" * 59
