"""Player pose: grid position plus facing."""

from __future__ import annotations

from dataclasses import dataclass

from .board import Board, Direction, Position, offset


@dataclass
class PlayerPose:
    """Where the player stands and which way it faces.

    Owned by the running ``Interpreter``; only Step commands mutate it.
    """

    position: Position
    facing: Direction = Direction.UP

    def ahead(self) -> Position:
        """Cell directly in front of the player."""
        return offset(self.position, self.facing)

    def turn_left(self) -> None:
        self.facing = self.facing.turned_left()

    def turn_right(self) -> None:
        self.facing = self.facing.turned_right()

    @classmethod
    def spawn(cls, board: Board) -> "PlayerPose":
        """Place a player on the board's Start tile, facing the level's start direction."""
        if board.start_position is None:
            raise ValueError("Board has no Start tile to spawn on")
        return cls(position=board.start_position, facing=board.start_direction)
