"""
Pydantic schemas for player progress.

Level-source schemas live in ``gridwalker.board.schemas``; this module holds
the records the progress stores persist between play sessions.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ProgressRecord(BaseModel):
    """Progress of one play session (one player name)."""

    model_config = ConfigDict(populate_by_name=True)

    player_name: str = Field("Player", alias="playerName")
    # Highest level number (1-based) completed in this session
    levels_passed: int = Field(0, ge=0, alias="levelsPassed")
    # Steps accumulated over every completed level
    total_steps: int = Field(0, ge=0, alias="totalSteps")


class ProgressFile(BaseModel):
    """All sessions stored by a progress backend."""

    model_config = ConfigDict(populate_by_name=True)

    sessions: List[ProgressRecord] = Field(default_factory=list, alias="allSessions")
