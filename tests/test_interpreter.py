"""Tests for program execution, failure handling, halting and signals."""

import asyncio

import pytest

from gridwalker.board import CompactLevel, Direction, MoveResult, TileKind
from gridwalker.commands import loop, move_forward, turn_left, turn_right
from gridwalker.interpreter import (
    FailureReason,
    Interpreter,
    InterpreterSignals,
    InterpreterState,
)
from gridwalker.level_parser import load_board


class Recorder:
    """Collects every signal and trigger call in order."""

    def __init__(self, signals: InterpreterSignals):
        self.events = []
        self.steps = []
        self.restarts = []
        self.completions = []
        signals.sequence_started.append(lambda: self.events.append("started"))
        signals.step_taken.append(self.steps.append)
        signals.sequence_completed.append(lambda: self.events.append("completed"))
        signals.sequence_failed.append(lambda reason: self.events.append(("failed", reason)))

    def on_restart(self, result):
        self.restarts.append(result)

    def on_level_complete(self, result):
        self.completions.append(result)


def make_interpreter(layout, definitions=None, start_direction="Right", step_delay=0):
    board = load_board(
        CompactLevel(layout=layout, definitions=definitions or [], start_direction=start_direction)
    )
    signals = InterpreterSignals()
    recorder = Recorder(signals)
    interpreter = Interpreter(
        board,
        step_delay=step_delay,
        signals=signals,
        on_restart=recorder.on_restart,
        on_level_complete=recorder.on_level_complete,
    )
    return board, interpreter, recorder


@pytest.mark.asyncio
async def test_walk_to_end_completes():
    _, interpreter, recorder = make_interpreter(["S.E"])

    result = await interpreter.run([move_forward(), move_forward()])

    assert result.state is InterpreterState.COMPLETED
    assert result.final_position == (2, 0)
    assert result.steps_taken == 2
    assert result.reached_end is True
    assert recorder.steps == [1, 2]
    assert recorder.events == ["started", "completed"]
    assert len(recorder.completions) == 1
    assert recorder.restarts == []


@pytest.mark.asyncio
async def test_wall_blocks_without_failing_the_run():
    _, interpreter, recorder = make_interpreter(["E#", "S#"])

    result = await interpreter.run([move_forward(), turn_left(), move_forward()])

    assert result.state is InterpreterState.COMPLETED
    assert result.steps_taken == 3
    assert result.final_position == (0, 1)
    assert result.final_facing is Direction.UP


@pytest.mark.asyncio
async def test_blocked_run_ending_off_end_fails():
    _, interpreter, recorder = make_interpreter(["S#E"])

    result = await interpreter.run([move_forward()])

    assert interpreter.last_move_result is MoveResult.BLOCKED
    assert result.final_position == (0, 0)
    assert result.state is InterpreterState.FAILED
    assert result.failure_reason is FailureReason.NOT_ON_END
    assert recorder.events == ["started", ("failed", FailureReason.NOT_ON_END)]
    assert len(recorder.restarts) == 1


@pytest.mark.asyncio
async def test_fall_off_edge_stops_the_program():
    _, interpreter, recorder = make_interpreter(["SE"], start_direction="Left")

    result = await interpreter.run([move_forward(), turn_right(), turn_right(), move_forward()])

    assert result.state is InterpreterState.FAILED
    assert result.failure_reason is FailureReason.FELL
    assert result.steps_taken == 1
    assert result.final_position == (0, 0)
    assert recorder.steps == [1]
    assert recorder.restarts[0].failure_reason is FailureReason.FELL
    assert recorder.completions == []


@pytest.mark.asyncio
async def test_loop_repeats_its_body():
    _, interpreter, recorder = make_interpreter(["SE"])

    result = await interpreter.run([loop(3, turn_left(), turn_right()), move_forward()])

    assert result.state is InterpreterState.COMPLETED
    assert result.steps_taken == 7
    assert recorder.steps == list(range(1, 8))
    assert result.final_facing is Direction.RIGHT


@pytest.mark.asyncio
async def test_zero_repeat_loop_runs_once():
    _, interpreter, _ = make_interpreter(["SE"])

    result = await interpreter.run([loop(0, move_forward())])

    assert result.state is InterpreterState.COMPLETED
    assert result.steps_taken == 1


@pytest.mark.asyncio
async def test_failure_in_nested_loop_unwinds_everything():
    _, interpreter, recorder = make_interpreter(["S.."])

    program = [
        loop(2, loop(3, move_forward()), turn_left()),
        turn_right(),
        move_forward(),
    ]
    result = await interpreter.run(program)

    assert result.failure_reason is FailureReason.FELL
    assert recorder.steps == [1, 2, 3]
    assert result.final_position == (2, 0)
    assert result.final_facing is Direction.RIGHT
    assert len(recorder.restarts) == 1


@pytest.mark.asyncio
async def test_switch_raises_bridge_for_crossing():
    definitions = [
        {"key": "s1", "type": "Switch", "switchId": 1},
        {"key": "B1", "type": "Bridge", "controlledBySwitchId": 1, "isBridgeInitiallyActive": False},
    ]
    board, interpreter, _ = make_interpreter(["Ss1B1E"], definitions)
    changes = []
    board.tile_listeners.append(lambda change: changes.append(change.visual_state))

    result = await interpreter.run([loop(3, move_forward())])

    assert result.state is InterpreterState.COMPLETED
    assert changes == ["switch_on", "bridge_active"]


@pytest.mark.asyncio
async def test_inactive_bridge_is_a_fall():
    definitions = [
        {"key": "B1", "type": "Bridge", "controlledBySwitchId": 1, "isBridgeInitiallyActive": False},
    ]
    _, interpreter, _ = make_interpreter(["SB1E"], definitions)

    result = await interpreter.run([move_forward(), move_forward()])

    assert result.failure_reason is FailureReason.FELL
    assert result.final_position == (0, 0)


@pytest.mark.asyncio
async def test_weak_floor_breaks_on_revisit():
    board, interpreter, recorder = make_interpreter(
        ["SW2E"], [{"key": "W2", "type": "WeakFloor", "initialSteps": 2}]
    )

    program = [move_forward(), loop(2, turn_left(), turn_left(), move_forward())]
    result = await interpreter.run(program)

    assert result.state is InterpreterState.FAILED
    assert result.failure_reason is FailureReason.FLOOR_BROKE
    assert result.steps_taken == 7
    assert result.final_position == (1, 0)
    assert board.tile_at((1, 0)).kind is TileKind.AIR
    assert board.check_move((1, 0)) is MoveResult.FALL
    assert recorder.events[-1] == ("failed", FailureReason.FLOOR_BROKE)


@pytest.mark.asyncio
async def test_single_visit_leaves_weak_floor_standing():
    board, interpreter, _ = make_interpreter(
        ["SW2E"], [{"key": "W2", "type": "WeakFloor", "initialSteps": 2}]
    )

    await interpreter.run([move_forward(), move_forward()])

    assert board.tile_at((1, 0)).steps_remaining == 1
    assert interpreter.state is InterpreterState.COMPLETED


@pytest.mark.asyncio
async def test_passing_over_end_is_not_success():
    _, interpreter, recorder = make_interpreter(["SE."])

    result = await interpreter.run([move_forward(), move_forward()])

    assert result.reached_end is True
    assert result.state is InterpreterState.FAILED
    assert result.failure_reason is FailureReason.NOT_ON_END
    assert recorder.completions == []


@pytest.mark.asyncio
async def test_empty_program_fails_unless_started_on_end():
    _, interpreter, recorder = make_interpreter(["SE"])

    result = await interpreter.run([])

    assert result.steps_taken == 0
    assert result.failure_reason is FailureReason.NOT_ON_END
    assert len(recorder.restarts) == 1


@pytest.mark.asyncio
async def test_halt_interrupts_the_step_delay():
    _, interpreter, recorder = make_interpreter(["S..E"], step_delay=10)

    task = asyncio.create_task(interpreter.run([loop(3, move_forward())]))
    await asyncio.sleep(0)

    assert interpreter.state is InterpreterState.RUNNING
    assert interpreter.pose.position == (1, 0)

    interpreter.halt()
    result = await asyncio.wait_for(task, timeout=1)

    assert result.state is InterpreterState.HALTED
    assert result.steps_taken == 1
    assert result.final_position == (1, 0)
    assert recorder.events == ["started"]
    assert recorder.restarts == []
    assert recorder.completions == []


@pytest.mark.asyncio
async def test_run_is_rejected_while_running():
    _, interpreter, recorder = make_interpreter(["S..E"], step_delay=10)

    task = asyncio.create_task(interpreter.run([loop(3, move_forward())]))
    await asyncio.sleep(0)

    assert await interpreter.run([turn_left()]) is None
    assert interpreter.pose.facing is Direction.RIGHT

    interpreter.halt()
    await asyncio.wait_for(task, timeout=1)
    assert recorder.events == ["started"]


@pytest.mark.asyncio
async def test_cancelled_run_leaves_interpreter_reusable():
    _, interpreter, recorder = make_interpreter(["S..E"], step_delay=10)

    task = asyncio.create_task(interpreter.run([loop(3, move_forward())]))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert interpreter.state is InterpreterState.HALTED
    assert recorder.restarts == []

    interpreter.step_delay = 0
    result = await interpreter.run([move_forward(), move_forward()])
    assert result is not None
    assert result.state is InterpreterState.COMPLETED
    assert result.final_position == (3, 0)


@pytest.mark.asyncio
async def test_halt_from_listener_stops_before_next_action():
    _, interpreter, recorder = make_interpreter(["SE"])

    def stop_at_second_step(count):
        if count == 2:
            interpreter.halt()

    interpreter.signals.step_taken.append(stop_at_second_step)
    result = await interpreter.run([turn_left(), turn_left(), turn_left()])

    assert result.state is InterpreterState.HALTED
    assert result.steps_taken == 2
    assert result.final_facing is Direction.UP


def test_halt_when_idle_is_a_no_op():
    _, interpreter, _ = make_interpreter(["SE"])

    interpreter.halt()
    interpreter.halt()

    assert interpreter.state is InterpreterState.IDLE


@pytest.mark.asyncio
async def test_interpreter_can_run_again_after_finishing():
    _, interpreter, recorder = make_interpreter(["S.E"])

    first = await interpreter.run([move_forward()])
    second = await interpreter.run([move_forward()])

    assert first.state is InterpreterState.FAILED
    assert second.state is InterpreterState.COMPLETED
    assert second.steps_taken == 1
    assert recorder.events.count("started") == 2


@pytest.mark.asyncio
async def test_async_triggers_are_awaited():
    board = load_board(CompactLevel(layout=["SE"], start_direction="Right"))
    called = []

    async def on_level_complete(result):
        await asyncio.sleep(0)
        called.append(result.state)

    interpreter = Interpreter(board, step_delay=0, on_level_complete=on_level_complete)
    await interpreter.run([move_forward()])

    assert called == [InterpreterState.COMPLETED]


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_the_run():
    _, interpreter, recorder = make_interpreter(["S.E"])

    def broken(count):
        raise RuntimeError("ui went away")

    interpreter.signals.step_taken.insert(0, broken)
    result = await interpreter.run([move_forward(), move_forward()])

    assert result.state is InterpreterState.COMPLETED
    assert recorder.steps == [1, 2]


@pytest.mark.asyncio
async def test_player_moved_reports_moves_and_turns():
    _, interpreter, _ = make_interpreter(["S.E"])
    moves = []
    interpreter.signals.player_moved.append(lambda position, facing: moves.append((position, facing)))

    await interpreter.run([turn_left(), turn_right(), move_forward()])

    assert moves == [
        ((0, 0), Direction.UP),
        ((0, 0), Direction.RIGHT),
        ((1, 0), Direction.RIGHT),
    ]


def test_negative_step_delay_is_rejected():
    board = load_board(CompactLevel(layout=["SE"]))

    with pytest.raises(ValueError):
        Interpreter(board, step_delay=-1)
