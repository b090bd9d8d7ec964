"""Command program model.

A program is an ordered list of commands. Each command is either an atomic
``Step`` or a ``Loop`` that repeats an ordered list of child commands.
Loops may nest to any depth even though authoring tools usually expose a
single level.

Commands are frozen: they are built once by the authoring layer and handed
to the ``Interpreter`` for the duration of one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Sequence, Tuple, Union


class StepAction(str, Enum):
    """Atomic player actions."""

    MOVE_FORWARD = "move_forward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"


@dataclass(frozen=True)
class Step:
    """One atomic action; counts as one step when executed."""

    action: StepAction


@dataclass(frozen=True)
class Loop:
    """Repeat ``children`` in full ``repeat_count`` times.

    ``repeat_count`` is clamped to at least 1: a loop authored with zero or
    negative repeats still runs its body once.
    """

    repeat_count: int
    children: Tuple["Command", ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # frozen dataclass: assign through object.__setattr__
        object.__setattr__(self, "repeat_count", max(1, int(self.repeat_count)))
        object.__setattr__(self, "children", tuple(self.children))


Command = Union[Step, Loop]


def move_forward() -> Step:
    return Step(StepAction.MOVE_FORWARD)


def turn_left() -> Step:
    return Step(StepAction.TURN_LEFT)


def turn_right() -> Step:
    return Step(StepAction.TURN_RIGHT)


def loop(repeat_count: int, *children: Command) -> Loop:
    return Loop(repeat_count, children)


def count_steps(commands: Iterable[Command]) -> int:
    """Number of atomic steps a complete (failure-free) run would execute."""

    total = 0
    for command in commands:
        if isinstance(command, Loop):
            total += command.repeat_count * count_steps(command.children)
        else:
            total += 1
    return total


_STEP_ALIASES = {
    "forward": StepAction.MOVE_FORWARD,
    "move_forward": StepAction.MOVE_FORWARD,
    "moveforward": StepAction.MOVE_FORWARD,
    "left": StepAction.TURN_LEFT,
    "turn_left": StepAction.TURN_LEFT,
    "turnleft": StepAction.TURN_LEFT,
    "right": StepAction.TURN_RIGHT,
    "turn_right": StepAction.TURN_RIGHT,
    "turnright": StepAction.TURN_RIGHT,
}


def parse_program(data: Sequence[Any]) -> List[Command]:
    """Build a command list from its JSON form.

    Items are step names (``"forward"``, ``"left"``, ``"right"`` or the
    ``StepAction`` values, case-insensitive) or loop objects
    ``{"loop": 3, "body": [...]}``.

    Raises:
        ValueError: If an item is neither a known step nor a loop object
    """

    if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
        raise ValueError("A program must be a list of commands")

    commands: List[Command] = []
    for item in data:
        if isinstance(item, str):
            action = _STEP_ALIASES.get(item.strip().lower())
            if action is None:
                raise ValueError(f"Unknown step '{item}'")
            commands.append(Step(action))
        elif isinstance(item, dict) and "loop" in item:
            try:
                repeat_count = int(item["loop"])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid loop count: {item['loop']!r}") from exc
            body = parse_program(item.get("body", []))
            commands.append(Loop(repeat_count, tuple(body)))
        else:
            raise ValueError(f"Unrecognized command entry: {item!r}")
    return commands
