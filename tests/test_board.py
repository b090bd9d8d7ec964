"""Tests for board queries, move legality and landing side effects."""

import pytest

from gridwalker.board import (
    Board,
    CompactLevel,
    Direction,
    LandingEffect,
    MoveResult,
    Tile,
    TileKind,
    offset,
)
from gridwalker.level_parser import load_board


SWITCH_BRIDGE_DEFS = [
    {"key": "s1", "type": "Switch", "switchId": 1},
    {
        "key": "B1",
        "type": "Bridge",
        "controlledBySwitchId": 1,
        "isBridgeInitiallyActive": False,
        "activateOnSwitchOn": True,
    },
]


def make_board(layout, definitions=None, start_direction="Right") -> Board:
    return load_board(
        CompactLevel(layout=layout, definitions=definitions or [], start_direction=start_direction)
    )


def test_tile_kind_parse_accepts_loose_spellings():
    assert TileKind.parse("WeakFloor") is TileKind.WEAK_FLOOR
    assert TileKind.parse("weak_floor") is TileKind.WEAK_FLOOR
    assert TileKind.parse(" bridge ") is TileKind.BRIDGE
    with pytest.raises(ValueError):
        TileKind.parse("Lava")


def test_direction_turns_wrap_around():
    assert Direction.UP.turned_left() is Direction.LEFT
    assert Direction.LEFT.turned_right() is Direction.UP
    assert Direction.RIGHT.turned_right() is Direction.DOWN
    for direction in Direction:
        assert direction.turned_left().turned_right() is direction


def test_direction_vectors_put_y_zero_at_bottom():
    assert offset((2, 2), Direction.UP) == (2, 3)
    assert offset((2, 2), Direction.DOWN) == (2, 1)
    assert offset((2, 2), Direction.LEFT) == (1, 2)
    assert Direction.RIGHT.vector == (1, 0)
    assert Direction.parse("east") is Direction.RIGHT
    assert Direction.parse("down") is Direction.DOWN


def test_tile_at_returns_none_outside_board():
    board = make_board(["S..E"])

    assert board.size == (4, 1)
    assert board.tile_at((0, 0)).kind is TileKind.START
    for position in [(-1, 0), (4, 0), (0, 1), (0, -1)]:
        assert board.tile_at(position) is None


def test_check_move_classifies_targets():
    board = make_board(["S.# E"])

    assert board.check_move((1, 0)) is MoveResult.SUCCESS
    assert board.check_move((2, 0)) is MoveResult.BLOCKED
    assert board.check_move((3, 0)) is MoveResult.FALL  # no tile
    assert board.check_move((4, 0)) is MoveResult.SUCCESS
    assert board.check_move((5, 0)) is MoveResult.FALL  # off the board
    assert board.check_move((0, 1)) is MoveResult.FALL


def test_check_move_does_not_mutate():
    board = make_board(["SW2E"], [{"key": "W2", "type": "WeakFloor", "initialSteps": 2}])

    for _ in range(3):
        assert board.check_move((1, 0)) is MoveResult.SUCCESS
    assert board.tile_at((1, 0)).steps_remaining == 2


def test_switch_toggles_bridge():
    board = make_board(["Ss1B1E"], SWITCH_BRIDGE_DEFS)
    switch = board.tile_at((1, 0))
    bridge = board.tile_at((2, 0))

    assert switch.is_on is False
    assert bridge.is_active is False
    assert board.check_move((2, 0)) is MoveResult.FALL

    result = board.on_player_landed((1, 0))
    assert result.effect is LandingEffect.NONE
    assert switch.is_on is True
    assert bridge.is_active is True
    assert [change.position for change in result.changes] == [(1, 0), (2, 0)]
    assert result.changes[1].visual_state == "bridge_active"
    assert board.check_move((2, 0)) is MoveResult.SUCCESS

    board.on_player_landed((1, 0))
    assert switch.is_on is False
    assert bridge.is_active is False


def test_bridge_state_is_derived_from_switch_at_load():
    definitions = [
        {"key": "s1", "type": "Switch", "switchId": 1},
        # Says active, but activates on ON while the switch starts OFF
        {"key": "A1", "type": "Bridge", "controlledBySwitchId": 1,
         "isBridgeInitiallyActive": True, "activateOnSwitchOn": True},
        # Says inactive, but activates on OFF
        {"key": "N1", "type": "Bridge", "controlledBySwitchId": 1,
         "isBridgeInitiallyActive": False, "activateOnSwitchOn": False},
        # No switch with id 9: the initial flag stands
        {"key": "F9", "type": "Bridge", "controlledBySwitchId": 9,
         "isBridgeInitiallyActive": True},
    ]
    board = make_board(["Ss1A1N1F9E"], definitions)

    assert board.tile_at((2, 0)).is_active is False
    assert board.tile_at((3, 0)).is_active is True
    assert board.tile_at((4, 0)).is_active is True

    board.on_player_landed((1, 0))
    assert board.tile_at((2, 0)).is_active is True
    assert board.tile_at((3, 0)).is_active is False
    assert board.tile_at((4, 0)).is_active is True


def test_switch_sync_reports_only_flips():
    board = make_board(["Ss1B1E"], SWITCH_BRIDGE_DEFS)
    switch = board.tile_at((1, 0))

    assert board.switch_sync(switch) == []
    switch.is_on = True
    assert len(board.switch_sync(switch)) == 1
    assert board.switch_sync(switch) == []


def test_weak_floor_decays_then_breaks():
    board = make_board(["SW2E"], [{"key": "W2", "type": "WeakFloor", "initialSteps": 2}])
    tile = board.tile_at((1, 0))

    first = board.on_player_landed((1, 0))
    assert first.effect is LandingEffect.NONE
    assert tile.steps_remaining == 1
    assert tile.kind is TileKind.WEAK_FLOOR
    assert first.changes[0].visual_state == "weak_floor_1"

    second = board.on_player_landed((1, 0))
    assert second.effect is LandingEffect.UNSAFE
    assert tile.steps_remaining == 0
    assert tile.kind is TileKind.AIR
    assert board.check_move((1, 0)) is MoveResult.FALL

    third = board.on_player_landed((1, 0))
    assert third.effect is LandingEffect.NONE
    assert third.changes == []
    assert tile.steps_remaining == 0


def test_end_landing_reports_level_complete():
    board = make_board(["S.E"])

    assert board.on_player_landed((2, 0)).effect is LandingEffect.LEVEL_COMPLETE
    assert board.on_player_landed((1, 0)).effect is LandingEffect.NONE
    assert board.on_player_landed((9, 9)).effect is LandingEffect.NONE


def test_tile_listeners_receive_changes():
    board = make_board(["Ss1B1E"], SWITCH_BRIDGE_DEFS)
    seen = []
    board.tile_listeners.append(lambda change: seen.append((change.position, change.visual_state)))

    board.on_player_landed((1, 0))

    assert seen == [((1, 0), "switch_on"), ((2, 0), "bridge_active")]


def test_failing_tile_listener_does_not_break_landing():
    board = make_board(["Ss1B1E"], SWITCH_BRIDGE_DEFS)

    def broken(change):
        raise RuntimeError("renderer crashed")

    board.tile_listeners.append(broken)
    result = board.on_player_landed((1, 0))

    assert len(result.changes) == 2
    assert board.tile_at((2, 0)).is_active is True


def test_place_rejects_out_of_bounds_and_duplicates():
    board = Board(2, 1)
    board.place(Tile(kind=TileKind.START, position=(0, 0)))

    assert board.start_position == (0, 0)
    with pytest.raises(ValueError):
        board.place(Tile(kind=TileKind.FLOOR, position=(2, 0)))
    with pytest.raises(ValueError):
        board.place(Tile(kind=TileKind.FLOOR, position=(0, 0)))


def test_tiles_iterate_in_ascending_position_order():
    board = make_board(["E.", "S."])

    assert [tile.position for tile in board.tiles()] == [(0, 0), (0, 1), (1, 0), (1, 1)]
    assert [tile.position for tile in board.tiles_of_kind(TileKind.FLOOR)] == [(1, 0), (1, 1)]
