"""Pydantic schemas for level sources.

Levels arrive in one of two interchangeable shapes:

- ``CompactLevel``: a list of layout strings plus multi-character tile
  definitions (the format level files are authored in).
- ``LevelData``: an explicit list of tile records with board dimensions
  (what the compact scanner produces, and what tools may emit directly).

Field names accept both the camelCase spelling used in level files
(``switchId``, ``initialSteps`` ...) and the snake_case attribute names.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TileParameters(BaseModel):
    """Switch / bridge / weak-floor parameters shared by definitions and records."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="Tile kind name, e.g. 'Floor', 'Switch', 'WeakFloor'")
    switch_id: int = Field(0, alias="switchId")
    controlled_by_switch_id: int = Field(0, alias="controlledBySwitchId")
    is_bridge_initially_active: bool = Field(True, alias="isBridgeInitiallyActive")
    # Bridge becomes walkable when its switch is ON (True) or OFF (False)
    activate_on_switch_on: bool = Field(True, alias="activateOnSwitchOn")
    initial_steps: int = Field(0, alias="initialSteps")


class TileDefinition(TileParameters):
    """Maps a layout key (one or more characters) to a tile template."""

    key: str = Field(..., min_length=1, description="Layout token, e.g. 'W3' or 'B1'")


class TileRecord(TileParameters):
    """A concrete tile at a grid position (x, y), y = 0 being the bottom row."""

    position: Tuple[int, int]


class CompactLevel(BaseModel):
    """Compact level description: layout rows (top row first) plus definitions."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    layout: List[str] = Field(default_factory=list)
    definitions: List[TileDefinition] = Field(default_factory=list)
    start_direction: Optional[str] = Field(None, alias="startDirection")


class LevelData(BaseModel):
    """Explicit level description: dimensions plus a sparse list of tiles."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    width: int
    height: int
    tiles: List[TileRecord] = Field(default_factory=list)
    start_direction: str = Field("Up", alias="startDirection")
    # Diagnostics raised while scanning a compact layout; carried into the board
    warnings: List[str] = Field(default_factory=list, exclude=True)
