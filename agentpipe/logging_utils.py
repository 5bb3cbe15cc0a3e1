"""Logging utilities for agentpipe simulations.

Provides color-coded output to distinguish round bookkeeping, agent results,
and failures.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Round orchestration
    YELLOW = "\033[93m"    # Plugins and evaluation
    RED = "\033[91m"       # Agent failures
    GREEN = "\033[92m"     # Successful agent results
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
        Colorized text if AGENTPIPE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("AGENTPIPE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def log_round(message: str) -> None:
    """Log round orchestration (blue)."""
    print(colored(message, Color.BLUE))


def log_plugin(message: str) -> None:
    """Log plugin or evaluator activity (yellow)."""
    print(colored(message, Color.YELLOW))


def log_error(message: str) -> None:
    """Log an agent failure (red)."""
    print(colored(message, Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(message, Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(message, Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_PLUGIN = "[+]"    # Plugin / evaluator
LOG_TAG_ERROR = "[!]"     # Agent failure
LOG_TAG_INFO = "[i]"      # Information
