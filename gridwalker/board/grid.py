"""Board state machine: tile lookup, move legality and landing side effects.

The board owns every ``Tile`` exclusively. Other components read tiles via
``tile_at`` but only mutate them through ``on_player_landed`` (and the
load-time ``switch_sync`` pass), so every stateful rule lives here:

- Switches flip when landed on and re-synchronize their bridges.
- Bridges are walkable only while ``is_active``, which is always recomputed
  from the controlling switch.
- Weak floors lose one step per landing and degrade to Air in place when
  they run out, so later queries see the hole without a side table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional

from ..logging_utils import log_board, log_verbose, log_warning
from .tiles import Direction, Position, Tile, TileKind


class MoveResult(str, Enum):
    """Outcome of attempting to enter a cell."""

    SUCCESS = "success"  # safe to stand on
    BLOCKED = "blocked"  # wall; the player stays put
    FALL = "fall"        # edge, air or inactive bridge


class LandingEffect(str, Enum):
    """What a landing means for the running program."""

    NONE = "none"
    UNSAFE = "unsafe"                  # weak floor broke under the player
    LEVEL_COMPLETE = "level_complete"  # landed on the End tile


@dataclass(frozen=True)
class TileChange:
    """A tile whose visual state changed (tile-changed signal payload)."""

    position: Position
    kind: TileKind
    visual_state: str


@dataclass
class LandingResult:
    """Result of ``Board.on_player_landed``."""

    effect: LandingEffect = LandingEffect.NONE
    changes: List[TileChange] = field(default_factory=list)


TileListener = Callable[[TileChange], None]


class Board:
    """Fixed-size grid of optional tiles plus the rules that mutate them.

    ``grid[x][y]`` is ``None`` where no tile exists (out of the level, or an
    Air cell that was never materialized). Boards are built by the level
    parser and replaced wholesale on restart, never patched.
    """

    def __init__(
        self,
        width: int,
        height: int,
        tiles: Iterable[Tile] = (),
        *,
        start_direction: Direction = Direction.UP,
        warnings: Optional[List[str]] = None,
        tile_listeners: Optional[List[TileListener]] = None,
    ):
        self.width = width
        self.height = height
        self.start_direction = start_direction
        self.start_position: Optional[Position] = None
        # Load-time diagnostics (unknown symbols, coerced values). Never fatal.
        self.warnings: List[str] = list(warnings or [])
        # Observers for the tile-changed signal. Invoked synchronously.
        self.tile_listeners: List[TileListener] = list(tile_listeners or [])
        self.grid: List[List[Optional[Tile]]] = [
            [None for _ in range(height)] for _ in range(width)
        ]
        for tile in tiles:
            self.place(tile)

    # ------------------------------------------------------------------
    # Geometry and lookup
    # ------------------------------------------------------------------

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def in_bounds(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def place(self, tile: Tile) -> None:
        """Put ``tile`` on its cell. Used while building a board only."""

        if not self.in_bounds(tile.position):
            raise ValueError(
                f"Tile {tile.kind.value} at {tile.position} is outside the "
                f"{self.width}x{self.height} board"
            )
        x, y = tile.position
        if self.grid[x][y] is not None:
            raise ValueError(f"Two tiles share position {tile.position}")
        self.grid[x][y] = tile
        if tile.kind is TileKind.START:
            self.start_position = tile.position

    def tile_at(self, position: Position) -> Optional[Tile]:
        """Return the tile at ``position`` or None (outside the board counts as no tile)."""

        if not self.in_bounds(position):
            return None
        x, y = position
        return self.grid[x][y]

    def tiles(self) -> Iterator[Tile]:
        """Yield placed tiles in ascending (x, y) order."""

        for column in self.grid:
            for tile in column:
                if tile is not None:
                    yield tile

    def tiles_of_kind(self, kind: TileKind) -> List[Tile]:
        return [tile for tile in self.tiles() if tile.kind is kind]

    def bridges_for(self, switch_id: int) -> List[Tile]:
        return [
            tile
            for tile in self.tiles()
            if tile.kind is TileKind.BRIDGE and tile.controlled_by_switch_id == switch_id
        ]

    def switch_for(self, switch_id: int) -> Optional[Tile]:
        for tile in self.tiles():
            if tile.kind is TileKind.SWITCH and tile.switch_id == switch_id:
                return tile
        return None

    # ------------------------------------------------------------------
    # Move legality
    # ------------------------------------------------------------------

    def check_move(self, target: Position) -> MoveResult:
        """Classify a move onto ``target`` without mutating anything.

        Weak floors are always enterable: breaking is a landing effect, not a
        legality rule.
        """

        tile = self.tile_at(target)
        if tile is None:
            return MoveResult.FALL
        if tile.kind is TileKind.WALL:
            return MoveResult.BLOCKED
        if tile.kind is TileKind.AIR:
            return MoveResult.FALL
        if tile.kind is TileKind.BRIDGE and not tile.is_active:
            return MoveResult.FALL
        return MoveResult.SUCCESS

    # ------------------------------------------------------------------
    # Landing side effects
    # ------------------------------------------------------------------

    def on_player_landed(self, position: Position) -> LandingResult:
        """Apply the side effect of the player arriving on ``position``.

        Called once per successful move, after the player's position was
        updated. Never raises; kinds without a landing rule are no-ops.
        """

        result = LandingResult()
        tile = self.tile_at(position)
        if tile is None:
            return result

        if tile.kind is TileKind.SWITCH:
            result.changes.extend(self._toggle_switch(tile))
        elif tile.kind is TileKind.WEAK_FLOOR:
            if tile.steps_remaining > 0:
                tile.steps_remaining -= 1
                log_board(
                    f"[Board] Weak floor at {tile.position}: "
                    f"{tile.steps_remaining} step(s) remaining"
                )
                if tile.steps_remaining == 0:
                    # Degrade in place so every later query sees the hole.
                    tile.kind = TileKind.AIR
                    result.effect = LandingEffect.UNSAFE
                    log_board(f"[Board] Weak floor at {tile.position} broke")
                result.changes.append(self._report(tile))
        elif tile.kind is TileKind.END:
            result.effect = LandingEffect.LEVEL_COMPLETE
            log_verbose(f"[Board] End tile reached at {tile.position}")

        return result

    def _toggle_switch(self, switch_tile: Tile) -> List[TileChange]:
        switch_tile.is_on = not switch_tile.is_on
        log_board(
            f"[Board] Switch {switch_tile.switch_id} at {switch_tile.position} "
            f"turned {'ON' if switch_tile.is_on else 'OFF'}"
        )
        changes = [self._report(switch_tile)]
        changes.extend(self.switch_sync(switch_tile))
        return changes

    def switch_sync(self, switch_tile: Tile) -> List[TileChange]:
        """Recompute every bridge bound to ``switch_tile``.

        ``is_active = (switch.is_on == bridge.activates_when_switch_on)``.
        Only bridges whose state actually flipped are reported, so running it
        twice with the same switch state reports nothing the second time.
        """

        changes: List[TileChange] = []
        for bridge in self.bridges_for(switch_tile.switch_id):
            active = switch_tile.is_on == bridge.activates_when_switch_on
            if bridge.is_active == active:
                continue
            bridge.is_active = active
            changes.append(self._report(bridge))
        return changes

    def sync_all_switches(self) -> None:
        """Load-time pass: sync bridges for every switch in ascending position order."""

        for switch_tile in self.tiles_of_kind(TileKind.SWITCH):
            self.switch_sync(switch_tile)

    def _report(self, tile: Tile) -> TileChange:
        change = TileChange(
            position=tile.position, kind=tile.kind, visual_state=tile.visual_state
        )
        for listener in self.tile_listeners:
            try:
                listener(change)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_warning(f"[Board] Tile listener failed: {exc}")
        return change
