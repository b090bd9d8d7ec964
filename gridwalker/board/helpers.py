"""Utilities for inspecting boards."""

from __future__ import annotations

from typing import Dict, List, Optional

from .grid import Board
from .tiles import Direction, Tile, TileKind

_DEFAULT_TILE_SYMBOLS: Dict[str, str] = {
    "floor": ".",
    "wall": "#",
    "start": "S",
    "end": "E",
    "air": " ",
    "switch_on": "o",
    "switch_off": "s",
    "bridge_active": "=",
    "bridge_inactive": "_",
}

_PLAYER_SYMBOLS: Dict[Direction, str] = {
    Direction.UP: "^",
    Direction.RIGHT: ">",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
}


def _symbol_for(tile: Optional[Tile], mapping: Dict[str, str]) -> str:
    if tile is None:
        return " "
    if tile.kind is TileKind.WEAK_FLOOR:
        # Single digit keeps the grid aligned; 9+ steps render as 9.
        return mapping.get(tile.visual_state, str(min(tile.steps_remaining, 9)))
    return mapping.get(tile.visual_state, "?")


def render_ascii_board(
    board: Board,
    pose=None,
    *,
    symbols: Optional[Dict[str, str]] = None,
) -> str:
    """Render ``board`` as text, top row first, one character per cell.

    ``pose`` is anything with ``position`` and ``facing`` attributes (normally
    a ``PlayerPose``); the player's cell shows an arrow. ``symbols`` overrides
    entries of the default mapping keyed by ``Tile.visual_state``. Unknown
    visual states fall back to ``?``.
    """

    mapping = {**_DEFAULT_TILE_SYMBOLS}
    if symbols:
        mapping.update(symbols)

    player_at = tuple(pose.position) if pose is not None else None

    lines: List[str] = []
    for y in range(board.height - 1, -1, -1):
        row_chars: List[str] = []
        for x in range(board.width):
            if player_at == (x, y):
                row_chars.append(_PLAYER_SYMBOLS[pose.facing])
            else:
                row_chars.append(_symbol_for(board.tile_at((x, y)), mapping))
        lines.append("".join(row_chars).rstrip())

    return "\n".join(lines)
