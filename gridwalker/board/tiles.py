"""Tile primitives for the puzzle board.

Board coordinates are ``(x, y)`` with ``y = 0`` on the bottom row, so
``Direction.UP`` increases ``y``. Tiles are mutable dataclasses: switches,
bridges and weak floors carry runtime state that the ``Board`` updates in
place as the player lands on cells.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

Position = Tuple[int, int]


class TileKind(str, Enum):
    """Every kind of cell a level can contain."""

    FLOOR = "Floor"
    WALL = "Wall"
    AIR = "Air"
    START = "Start"
    END = "End"
    SWITCH = "Switch"
    BRIDGE = "Bridge"
    WEAK_FLOOR = "WeakFloor"

    @classmethod
    def parse(cls, text: str) -> "TileKind":
        """Resolve a kind string case-insensitively ("weakfloor", "weak_floor", "WeakFloor")."""

        normalized = text.strip().replace("_", "").replace("-", "").lower()
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        raise ValueError(f"Unknown tile type '{text}'")


class Direction(int, Enum):
    """Cardinal facing, in clockwise order so turns are modular arithmetic."""

    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def turned_left(self) -> "Direction":
        return Direction((self.value + 3) % 4)

    def turned_right(self) -> "Direction":
        return Direction((self.value + 1) % 4)

    @property
    def vector(self) -> Position:
        return DIRECTION_VECTORS[self]

    @classmethod
    def parse(cls, text: str) -> "Direction":
        """Resolve a direction name case-insensitively; compass names are accepted too."""

        normalized = text.strip().lower()
        if normalized in _COMPASS_ALIASES:
            return _COMPASS_ALIASES[normalized]
        for direction in cls:
            if direction.name.lower() == normalized:
                return direction
        raise ValueError(f"Unknown direction '{text}'")


DIRECTION_VECTORS: Dict[Direction, Position] = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
}

_COMPASS_ALIASES: Dict[str, Direction] = {
    "north": Direction.UP,
    "east": Direction.RIGHT,
    "south": Direction.DOWN,
    "west": Direction.LEFT,
}


def offset(position: Position, direction: Direction) -> Position:
    """Return the neighbouring cell of ``position`` in ``direction``."""

    dx, dy = DIRECTION_VECTORS[direction]
    return position[0] + dx, position[1] + dy


@dataclass
class Tile:
    """One addressable cell of the board.

    Only the fields of the tile's own kind are meaningful; the rest keep
    their defaults. Runtime fields (``is_on``, ``is_active``,
    ``steps_remaining``) are owned by the ``Board`` and must only change
    through its operations.
    """

    kind: TileKind
    position: Position

    # Switch
    switch_id: int = 0
    is_on: bool = False

    # Bridge
    controlled_by_switch_id: int = 0
    activates_when_switch_on: bool = True
    initially_active: bool = True
    is_active: bool = False

    # WeakFloor
    initial_steps: int = 0
    steps_remaining: int = 0

    @property
    def is_walkable(self) -> bool:
        """True when a move onto this tile succeeds (see ``Board.check_move``)."""

        if self.kind in (TileKind.WALL, TileKind.AIR):
            return False
        if self.kind is TileKind.BRIDGE:
            return self.is_active
        return True

    @property
    def visual_state(self) -> str:
        """Short label a renderer can map to a sprite."""

        if self.kind is TileKind.SWITCH:
            return "switch_on" if self.is_on else "switch_off"
        if self.kind is TileKind.BRIDGE:
            return "bridge_active" if self.is_active else "bridge_inactive"
        if self.kind is TileKind.WEAK_FLOOR:
            return f"weak_floor_{self.steps_remaining}"
        return {
            TileKind.FLOOR: "floor",
            TileKind.WALL: "wall",
            TileKind.START: "start",
            TileKind.END: "end",
        }.get(self.kind, "air")
