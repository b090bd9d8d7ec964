"""Logging utilities for gridwalker runs.

Provides color-coded console output to distinguish board effects, warnings,
failures, and successful outcomes while a command program executes.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for message types
    BLUE = "\033[94m"      # Board effects (switches, bridges, weak floors)
    YELLOW = "\033[93m"    # Diagnostics and rejected calls
    RED = "\033[91m"       # Falls and failed runs
    GREEN = "\033[92m"     # Completed runs and levels
    CYAN = "\033[96m"      # Info/metadata

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
        Colorized text if GRIDWALKER_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("GRIDWALKER_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def verbose_enabled() -> bool:
    """Return True when per-step output was requested via GRIDWALKER_VERBOSE."""
    return bool(os.getenv("GRIDWALKER_VERBOSE"))


def log_board(message: str) -> None:
    """Log a board side effect (blue)."""
    print(colored(f"{LOG_TAG_BOARD} {message}", Color.BLUE))


def log_warning(message: str) -> None:
    """Log a non-fatal diagnostic (yellow)."""
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log a failure (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


def log_verbose(message: str) -> None:
    """Log per-step detail (cyan), only when GRIDWALKER_VERBOSE is set."""
    if verbose_enabled():
        print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for message types (color-blind accessible)
LOG_TAG_BOARD = "[•]"     # Board side effect
LOG_TAG_WARNING = "[?]"   # Diagnostic
LOG_TAG_ERROR = "[!]"     # Failure
LOG_TAG_SUCCESS = "[✓]"   # Success
LOG_TAG_INFO = "[i]"      # Information
