"""
Agentpipe Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import InvalidArgumentError

# Load .env file if it exists
load_dotenv()


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


def _flag(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Worker pool shared by every round of an Environment
    MAX_WORKERS: int = int(os.getenv("AGENTPIPE_MAX_WORKERS", "8"))

    # Per-agent deadline inside a round (seconds). Unset means wait forever.
    ROUND_TIMEOUT: Optional[float] = _optional_float(os.getenv("AGENTPIPE_ROUND_TIMEOUT"))

    # Print "<agent> -> <result>" lines while rounds run
    VERBOSE: bool = _flag(os.getenv("AGENTPIPE_VERBOSE"))

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent
    SCENARIOS_DIR: Path = Path(
        os.getenv("AGENTPIPE_SCENARIOS_DIR", str(PROJECT_ROOT / "scenarios"))
    )

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.MAX_WORKERS < 1:
            raise InvalidArgumentError(
                f"AGENTPIPE_MAX_WORKERS must be >= 1 (got {cls.MAX_WORKERS})"
            )
        if cls.ROUND_TIMEOUT is not None and cls.ROUND_TIMEOUT <= 0:
            raise InvalidArgumentError(
                f"AGENTPIPE_ROUND_TIMEOUT must be positive when set (got {cls.ROUND_TIMEOUT})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        timeout = f"{cls.ROUND_TIMEOUT}s" if cls.ROUND_TIMEOUT is not None else "none"
        lines = [
            "Agentpipe Configuration:",
            f"  Max Workers: {cls.MAX_WORKERS}",
            f"  Round Timeout: {timeout}",
            f"  Verbose: {cls.VERBOSE}",
            f"  Scenarios: {cls.SCENARIOS_DIR}",
        ]
        return "\n".join(lines)
