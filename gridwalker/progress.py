"""
ProgressStore interface for pluggable score storage.

This module provides the abstract ProgressStore interface and two concrete
implementations for recording how far each player got. Storage is OPTIONAL:
a ``LevelSession`` runs with the in-memory store unless another is injected.

Two included implementations:
1. InMemoryProgressStore - list-based storage, data lost on exit (tests, demos)
2. JsonProgressStore - a single human-readable JSON file holding every session

Key responsibilities:
- Start a session for a player name
- Record a completed level (highest level passed, accumulated steps)
- List every stored session (high-score tables)

Usage pattern:
    store = JsonProgressStore("player_scores.json")
    await store.initialize()
    await store.begin_session("Ada")
    await store.update_progress(level_number=1, steps=7)
    await store.close()
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .config import Config
from .schemas import ProgressFile, ProgressRecord


class ProgressStore(ABC):
    """Abstract base class for player progress storage.

    All methods are async so file or database backends never block the
    interpreter's event loop. ``initialize()`` and ``close()`` manage backend
    lifecycle; the in-memory store treats them as no-ops.
    """

    def __init__(self) -> None:
        self.sessions: List[ProgressRecord] = []
        self._current: Optional[ProgressRecord] = None

    @property
    def current(self) -> Optional[ProgressRecord]:
        """Session started by the last ``begin_session`` call, if any."""
        return self._current

    @abstractmethod
    async def initialize(self) -> None:
        """Load existing sessions from the backend."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush and release the backend."""
        pass

    @abstractmethod
    async def save(self) -> None:
        """Persist every session to the backend."""
        pass

    async def begin_session(self, player_name: Optional[str] = None) -> ProgressRecord:
        """Start a fresh session (zero levels, zero steps) and persist it."""
        record = ProgressRecord(player_name=player_name or Config.DEFAULT_PLAYER_NAME)
        self.sessions.append(record)
        self._current = record
        await self.save()
        return record

    async def set_player_name(self, player_name: str) -> None:
        self._require_current().player_name = player_name
        await self.save()

    async def update_progress(self, level_number: int, steps: int) -> ProgressRecord:
        """Record a completed level.

        Args:
            level_number: 1-based number of the level just passed
            steps: Steps the winning run took

        Returns:
            The updated current session
        """
        record = self._require_current()
        record.levels_passed = max(record.levels_passed, level_number)
        record.total_steps += steps
        await self.save()
        return record

    async def get_all_sessions(self) -> List[ProgressRecord]:
        return list(self.sessions)

    async def player_name_exists(self, player_name: str) -> bool:
        """Case-insensitive lookup over every stored session."""
        wanted = player_name.casefold()
        return any(record.player_name.casefold() == wanted for record in self.sessions)

    def _require_current(self) -> ProgressRecord:
        if self._current is None:
            raise RuntimeError("No progress session started; call begin_session() first")
        return self._current


class InMemoryProgressStore(ProgressStore):
    """Keeps sessions in a list; nothing survives the process."""

    async def initialize(self) -> None:
        # Nothing to load
        return None

    async def close(self) -> None:
        return None

    async def save(self) -> None:
        return None


class JsonProgressStore(ProgressStore):
    """Stores every session in one JSON file.

    File format (pretty-printed, rewritten in full on each save):
    ```json
    {"allSessions": [{"playerName": "Ada", "levelsPassed": 2, "totalSteps": 14}]}
    ```

    File I/O runs in a worker thread (asyncio.to_thread) so saves don't
    block a running program. No locking: one process per file.
    """

    def __init__(self, path: Path | str | None = None):
        super().__init__()
        self.path = Path(path) if path is not None else Config.PROGRESS_PATH

    async def initialize(self) -> None:
        if not self.path.exists():
            self.sessions = []
            return

        text = await asyncio.to_thread(self.path.read_text, "utf-8")
        stored = ProgressFile.model_validate_json(text) if text.strip() else ProgressFile()
        self.sessions = list(stored.sessions)

    async def close(self) -> None:
        await self.save()

    async def save(self) -> None:
        payload = ProgressFile(sessions=self.sessions).model_dump(mode="json", by_alias=True)

        def _write() -> None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), "utf-8")

        await asyncio.to_thread(_write)
