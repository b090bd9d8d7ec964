"""
Gridwalker - simulation core for a command-programmed grid puzzle.

Parse a level into a board of stateful tiles, then run a program of
movement commands (with nested loops) against it.

No rendering, audio or scene management. Boards, triggers and listeners
are all injected by the embedding application.
"""

__version__ = "0.1.0"

# Board and tiles
from .board import (
    Board,
    CompactLevel,
    Direction,
    LandingEffect,
    LandingResult,
    LevelData,
    MoveResult,
    Tile,
    TileChange,
    TileDefinition,
    TileKind,
    TileRecord,
    render_ascii_board,
)

# Level loading
from .level_parser import (
    LevelLoadError,
    LevelLoader,
    LevelParser,
    build_board,
    load_board,
    load_level,
    parse_compact_level,
)

# Programs and execution
from .commands import (
    Command,
    Loop,
    Step,
    StepAction,
    count_steps,
    loop,
    move_forward,
    parse_program,
    turn_left,
    turn_right,
)
from .player import PlayerPose
from .interpreter import (
    FailureReason,
    Interpreter,
    InterpreterSignals,
    InterpreterState,
    RunResult,
)

# Sessions and progress
from .progress import InMemoryProgressStore, JsonProgressStore, ProgressStore
from .schemas import ProgressFile, ProgressRecord
from .session import LevelSession

__all__ = [
    # Board
    "Board",
    "CompactLevel",
    "Direction",
    "LandingEffect",
    "LandingResult",
    "LevelData",
    "MoveResult",
    "Tile",
    "TileChange",
    "TileDefinition",
    "TileKind",
    "TileRecord",
    "render_ascii_board",
    # Level loading
    "LevelLoadError",
    "LevelLoader",
    "LevelParser",
    "build_board",
    "load_board",
    "load_level",
    "parse_compact_level",
    # Programs
    "Command",
    "Loop",
    "Step",
    "StepAction",
    "count_steps",
    "loop",
    "move_forward",
    "parse_program",
    "turn_left",
    "turn_right",
    # Execution
    "PlayerPose",
    "FailureReason",
    "Interpreter",
    "InterpreterSignals",
    "InterpreterState",
    "RunResult",
    # Sessions and progress
    "InMemoryProgressStore",
    "JsonProgressStore",
    "ProgressStore",
    "ProgressFile",
    "ProgressRecord",
    "LevelSession",
]
