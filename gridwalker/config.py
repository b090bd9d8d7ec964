"""
Gridwalker Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Execution pacing: seconds the interpreter waits after each atomic step
    STEP_DELAY_SECONDS: float = float(os.getenv("GRIDWALKER_STEP_DELAY", "0.5"))

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    LEVELS_DIR: Path = Path(
        os.getenv("GRIDWALKER_LEVELS_DIR", str(PROJECT_ROOT / "examples" / "levels"))
    )

    # Progress storage (JsonProgressStore)
    PROGRESS_PATH: Path = Path(os.getenv("GRIDWALKER_PROGRESS_PATH", "player_scores.json"))
    DEFAULT_PLAYER_NAME: str = os.getenv("GRIDWALKER_PLAYER_NAME", "Player")

    # Logging
    VERBOSE: bool = bool(os.getenv("GRIDWALKER_VERBOSE"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for unusable values."""
        if cls.STEP_DELAY_SECONDS < 0:
            raise ValueError(
                "GRIDWALKER_STEP_DELAY must be zero or positive "
                f"(got {cls.STEP_DELAY_SECONDS})"
            )

        if not cls.DEFAULT_PLAYER_NAME.strip():
            raise ValueError("GRIDWALKER_PLAYER_NAME must not be blank")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Gridwalker Configuration:",
            f"  Step Delay: {cls.STEP_DELAY_SECONDS}s",
            f"  Levels: {cls.LEVELS_DIR}",
            f"  Progress File: {cls.PROGRESS_PATH}",
            f"  Player: {cls.DEFAULT_PLAYER_NAME}",
            f"  Verbose: {cls.VERBOSE}",
        ]
        return "\n".join(lines)
