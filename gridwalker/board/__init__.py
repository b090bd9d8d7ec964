"""Board state machine and tile primitives for gridwalker."""

from .tiles import (
    DIRECTION_VECTORS,
    Direction,
    Position,
    Tile,
    TileKind,
    offset,
)
from .grid import (
    Board,
    LandingEffect,
    LandingResult,
    MoveResult,
    TileChange,
    TileListener,
)
from .schemas import (
    CompactLevel,
    LevelData,
    TileDefinition,
    TileParameters,
    TileRecord,
)
from .helpers import render_ascii_board

__all__ = [
    "DIRECTION_VECTORS",
    "Direction",
    "Position",
    "Tile",
    "TileKind",
    "offset",
    "Board",
    "LandingEffect",
    "LandingResult",
    "MoveResult",
    "TileChange",
    "TileListener",
    "CompactLevel",
    "LevelData",
    "TileDefinition",
    "TileParameters",
    "TileRecord",
    "render_ascii_board",
]
