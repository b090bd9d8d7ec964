"""
Command interpreter.

Fully decoupled from rendering, audio and scene management. The board,
player pose, signal listeners and the restart / level-complete triggers
are all injected by the caller.

Coordinates one run of a command program:
1. Reject the call if a run is already in progress
2. Expand the program depth-first (loops recurse into their children)
3. Execute each atomic step against the board, then wait ``step_delay``
4. Stop at once on a fall or a broken weak floor
5. On exhausting the program, succeed only if the player stands on End

The inter-step wait is the only suspension point. It waits on a per-run
halt event with a timeout, so ``halt()`` wakes it immediately and no
further command starts.
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from .board import Board, Direction, MoveResult, LandingEffect, Position, TileKind
from .commands import Command, Loop, StepAction, count_steps
from .config import Config
from .logging_utils import (
    log_error,
    log_info,
    log_success,
    log_verbose,
    log_warning,
)
from .player import PlayerPose


class InterpreterState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    HALTED = "halted"


class FailureReason(str, Enum):
    FELL = "fell"                # stepped off the board, into air, or onto an inactive bridge
    FLOOR_BROKE = "floor_broke"  # weak floor collapsed under the player
    NOT_ON_END = "not_on_end"    # program finished anywhere but the End tile


@dataclass
class RunResult:
    """Summary of one finished (or halted) run."""

    state: InterpreterState
    steps_taken: int
    final_position: Position
    final_facing: Direction
    failure_reason: Optional[FailureReason] = None
    reached_end: bool = False


@dataclass
class InterpreterSignals:
    """Observer lists for run signals.

    Listeners are invoked synchronously, in registration order. They are
    fire-and-forget: a listener that raises is logged and skipped, and the
    run carries on.
    """

    sequence_started: List[Callable[[], None]] = field(default_factory=list)
    step_taken: List[Callable[[int], None]] = field(default_factory=list)
    sequence_completed: List[Callable[[], None]] = field(default_factory=list)
    sequence_failed: List[Callable[[FailureReason], None]] = field(default_factory=list)
    player_moved: List[Callable[[Position, Direction], None]] = field(default_factory=list)

    def emit(self, signal: str, *args: Any) -> None:
        for listener in getattr(self, signal):
            try:
                listener(*args)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_warning(f"[Interpreter] Listener for '{signal}' failed: {exc}")


Trigger = Callable[[RunResult], Any]


class Interpreter:
    """Runs command programs against a board, one run at a time.

    State machine: IDLE -> RUNNING -> {COMPLETED, FAILED}, plus
    RUNNING -> HALTED through ``halt()``. A finished or halted interpreter
    may run again; a running one rejects ``run``.
    """

    def __init__(
        self,
        board: Board,
        pose: Optional[PlayerPose] = None,
        *,
        step_delay: Optional[float] = None,
        signals: Optional[InterpreterSignals] = None,
        on_restart: Optional[Trigger] = None,
        on_level_complete: Optional[Trigger] = None,
    ):
        """Initialize the interpreter with all collaborators injected.

        Args:
            board: Board to walk; the interpreter never replaces it
            pose: Starting pose; defaults to the board's Start tile and
                start direction
            step_delay: Seconds to wait after each atomic step (defaults to
                Config.STEP_DELAY_SECONDS)
            signals: Observer lists for run signals
            on_restart: Called with the RunResult after a failure; may be async
            on_level_complete: Called with the RunResult after a successful
                run; may be async
        """
        self.board = board
        self.pose = pose or PlayerPose.spawn(board)
        self.step_delay = Config.STEP_DELAY_SECONDS if step_delay is None else float(step_delay)
        if self.step_delay < 0:
            raise ValueError(f"step_delay must be >= 0 (got {self.step_delay})")
        self.signals = signals or InterpreterSignals()
        self.on_restart = on_restart
        self.on_level_complete = on_level_complete

        self.state = InterpreterState.IDLE
        self.step_count = 0
        self.reached_end = False
        self.failure_reason: Optional[FailureReason] = None
        self.last_move_result: Optional[MoveResult] = None
        # Cancellation token for the current run. Set by halt() and by failures.
        self._halt_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self.state is InterpreterState.RUNNING

    async def run(self, commands: Sequence[Command]) -> Optional[RunResult]:
        """Execute ``commands`` to completion, failure or halt.

        Returns:
            RunResult for this run, or None if the call was rejected because
            a run is already in progress
        """
        if self.is_running:
            log_warning("[Interpreter] run() called while a program is running; ignored")
            return None

        self.state = InterpreterState.RUNNING
        self.step_count = 0
        self.reached_end = False
        self.failure_reason = None
        self.last_move_result = None
        self._halt_event = asyncio.Event()

        log_info(f"[Interpreter] Sequence start ({count_steps(commands)} step(s) queued)")
        self.signals.emit("sequence_started")

        try:
            await self._execute(commands)

            # Only reached with RUNNING if nothing failed and nobody halted us.
            if self.is_running:
                await self._resolve_final_position()
        except asyncio.CancelledError:
            # Task teardown: leave RUNNING so the interpreter can run again.
            if self.is_running:
                self.state = InterpreterState.HALTED
                log_warning(f"[Interpreter] Run cancelled after {self.step_count} step(s)")
            raise

        return self.result()

    def halt(self) -> None:
        """Stop the current run immediately. Idempotent; no-op unless running."""
        if not self.is_running:
            return
        self.state = InterpreterState.HALTED
        if self._halt_event is not None:
            self._halt_event.set()
        log_info(f"[Interpreter] Halted after {self.step_count} step(s)")

    def result(self) -> RunResult:
        return RunResult(
            state=self.state,
            steps_taken=self.step_count,
            final_position=self.pose.position,
            final_facing=self.pose.facing,
            failure_reason=self.failure_reason,
            reached_end=self.reached_end,
        )

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    async def _execute(self, commands: Sequence[Command]) -> None:
        for command in commands:
            # A failure or halt anywhere below unwinds every enclosing level.
            if not self.is_running:
                return

            if isinstance(command, Loop):
                log_verbose(f"[Interpreter] Loop start (x{command.repeat_count})")
                for _ in range(command.repeat_count):
                    await self._execute(command.children)
                    if not self.is_running:
                        return
                log_verbose("[Interpreter] Loop end")
            else:
                self.step_count += 1
                self.signals.emit("step_taken", self.step_count)
                if not self.is_running:
                    return
                await self._perform(command.action)
                if not self.is_running:
                    return
                await self._pause()

    async def _pause(self) -> None:
        if self.step_delay <= 0:
            # Still yield so a halt() from another task is observed.
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._halt_event.wait(), timeout=self.step_delay)
        except asyncio.TimeoutError:
            pass

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    async def _perform(self, action: StepAction) -> None:
        if action is StepAction.TURN_LEFT:
            self.pose.turn_left()
            self._moved()
        elif action is StepAction.TURN_RIGHT:
            self.pose.turn_right()
            self._moved()
        else:
            reason = self._move_forward()
            if reason is not None:
                await self._fail(reason)

    def _move_forward(self) -> Optional[FailureReason]:
        target = self.pose.ahead()
        outcome = self.board.check_move(target)
        self.last_move_result = outcome

        if outcome is MoveResult.BLOCKED:
            log_verbose(f"[Interpreter] Move to {target} blocked by a wall")
            return None
        if outcome is MoveResult.FALL:
            log_error(f"[Interpreter] Fell at {target} (edge, air or inactive bridge)")
            return FailureReason.FELL

        self.pose.position = target
        self._moved()
        landing = self.board.on_player_landed(target)
        if landing.effect is LandingEffect.UNSAFE:
            log_error(f"[Interpreter] Weak floor at {target} broke under the player")
            return FailureReason.FLOOR_BROKE
        if landing.effect is LandingEffect.LEVEL_COMPLETE:
            self.reached_end = True
        return None

    def _moved(self) -> None:
        log_verbose(f"[Interpreter] Player at {self.pose.position} facing {self.pose.facing.name}")
        self.signals.emit("player_moved", self.pose.position, self.pose.facing)

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    async def _resolve_final_position(self) -> None:
        tile = self.board.tile_at(self.pose.position)
        if tile is not None and tile.kind is TileKind.END:
            self.state = InterpreterState.COMPLETED
            log_success(f"[Interpreter] Sequence complete in {self.step_count} step(s)")
            self.signals.emit("sequence_completed")
            await self._invoke(self.on_level_complete)
        else:
            log_error("[Interpreter] Sequence failed: not on the End tile")
            await self._fail(FailureReason.NOT_ON_END)

    async def _fail(self, reason: FailureReason) -> None:
        self.state = InterpreterState.FAILED
        self.failure_reason = reason
        if self._halt_event is not None:
            self._halt_event.set()
        self.signals.emit("sequence_failed", reason)
        await self._invoke(self.on_restart)

    async def _invoke(self, trigger: Optional[Trigger]) -> None:
        if trigger is None:
            return
        outcome = trigger(self.result())
        if inspect.isawaitable(outcome):
            await outcome
