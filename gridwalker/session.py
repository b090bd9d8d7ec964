"""
Level session: the embedding glue around boards and interpreters.

Owns the list of levels and the collaborators the core only knows as
opaque triggers:

- restart: rebuild the current level from its source (never patched)
- next level: record progress, announce level-completed, load the next one

Listener lists (run signals, tile changes, level completions) live on the
session and are re-attached to every freshly built board and interpreter,
so UI code subscribes once per session rather than once per level load.
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .board import Board, TileListener
from .commands import Command
from .interpreter import Interpreter, InterpreterSignals, RunResult
from .level_parser import LevelLoader, LevelSource, load_board
from .logging_utils import log_info, log_success, log_warning
from .player import PlayerPose
from .progress import InMemoryProgressStore, ProgressStore

# (steps_taken, level_index)
LevelListener = Callable[[int, int], None]


class LevelSession:
    """Plays a sequence of levels with restart and next-level handling."""

    def __init__(
        self,
        levels: Sequence[LevelSource],
        *,
        level_names: Optional[Sequence[str]] = None,
        step_delay: Optional[float] = None,
        progress: Optional[ProgressStore] = None,
        player_name: Optional[str] = None,
    ):
        """Initialize a session; nothing is loaded until ``start`` or ``load_level``.

        Args:
            levels: Level sources in play order
            level_names: Optional names used in diagnostics (parallel to levels)
            step_delay: Inter-step delay passed to every interpreter
            progress: Progress backend (defaults to InMemoryProgressStore)
            player_name: Name for the progress session
        """
        if not levels:
            raise ValueError("A level session needs at least one level")
        self.levels: List[LevelSource] = list(levels)
        self.level_names: List[Optional[str]] = (
            list(level_names) if level_names is not None else [None] * len(self.levels)
        )
        self.step_delay = step_delay
        self.progress = progress or InMemoryProgressStore()
        self.player_name = player_name

        self.signals = InterpreterSignals()
        self.tile_listeners: List[TileListener] = []
        self.level_listeners: List[LevelListener] = []

        self.current_index = 0
        self.board: Optional[Board] = None
        self.interpreter: Optional[Interpreter] = None
        self.campaign_complete = False
        self.restart_count = 0

    @classmethod
    def from_directory(cls, levels_dir: Optional[Path] = None, **kwargs) -> "LevelSession":
        """Build a session from every level file in ``levels_dir`` (sorted by name)."""
        loader = LevelLoader(levels_dir)
        names = loader.list_levels()
        if not names:
            raise FileNotFoundError(f"No level files found in {loader.levels_dir}")
        sources = [loader.load_source(name) for name in names]
        return cls(sources, level_names=names, **kwargs)

    @property
    def pose(self) -> Optional[PlayerPose]:
        return self.interpreter.pose if self.interpreter is not None else None

    async def start(self, first_level: int = 0) -> Board:
        """Open the progress backend, begin a progress session and load a level."""
        await self.progress.initialize()
        await self.progress.begin_session(self.player_name)
        return self.load_level(first_level)

    def load_level(self, index: int) -> Board:
        """Build a fresh board for level ``index`` and a new interpreter on it.

        Raises:
            IndexError: If index is outside the level list
            LevelLoadError: If the level source is structurally invalid
        """
        if not 0 <= index < len(self.levels):
            raise IndexError(f"Level index {index} out of range (0..{len(self.levels) - 1})")

        if self.interpreter is not None:
            self.interpreter.halt()

        board = load_board(self.levels[index], level_name=self.level_names[index])
        # Shared list: listeners added later still see this board's changes.
        board.tile_listeners = self.tile_listeners

        self.board = board
        self.current_index = index
        self.campaign_complete = False
        self.interpreter = Interpreter(
            board,
            PlayerPose.spawn(board),
            step_delay=self.step_delay,
            signals=self.signals,
            on_restart=self._handle_restart,
            on_level_complete=self._handle_level_complete,
        )
        log_info(f"[Session] Level {index + 1}/{len(self.levels)} ready")
        return board

    def restart_level(self) -> Board:
        return self.load_level(self.current_index)

    async def play(self, commands: Sequence[Command]) -> Optional[RunResult]:
        """Run a program on the current level.

        Returns the interpreter's RunResult (None if a run was already in
        progress). A failed run has already rebuilt the level and a
        completed run has already advanced when this returns.
        """
        if self.interpreter is None:
            raise RuntimeError("No level loaded; call start() or load_level() first")
        if self.campaign_complete:
            log_warning("[Session] All levels are complete; nothing to play")
            return None
        return await self.interpreter.run(commands)

    def halt(self) -> None:
        if self.interpreter is not None:
            self.interpreter.halt()

    async def close(self) -> None:
        self.halt()
        await self.progress.close()

    # ------------------------------------------------------------------
    # Triggers handed to the interpreter
    # ------------------------------------------------------------------

    def _handle_restart(self, result: RunResult) -> None:
        self.restart_count += 1
        log_info(f"[Session] Restarting level {self.current_index + 1} ({result.failure_reason.value})")
        self.restart_level()

    async def _handle_level_complete(self, result: RunResult) -> None:
        level_index = self.current_index
        for listener in self.level_listeners:
            try:
                listener(result.steps_taken, level_index)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_warning(f"[Session] Level listener failed: {exc}")

        if self.progress.current is not None:
            await self.progress.update_progress(level_index + 1, result.steps_taken)

        next_index = level_index + 1
        if next_index >= len(self.levels):
            self.campaign_complete = True
            log_success("[Session] Every level completed!")
            return

        self.load_level(next_index)
