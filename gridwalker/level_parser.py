"""
Level parsing and loading for JSON-defined puzzle boards.

This module turns level descriptions into ready-to-play ``Board`` objects.
Two source shapes are accepted and are interchangeable:

- ``CompactLevel``: layout rows plus multi-character tile definitions
- ``LevelData``: explicit tile records with board dimensions

Compact level file structure:
```json
{
  "name": "Bridge Basics",
  "startDirection": "Right",
  "layout": [
    "#####",
    "S.s1B1E",
    "#####"
  ],
  "definitions": [
    {"key": "s1", "type": "Switch", "switchId": 1},
    {"key": "B1", "type": "Bridge", "controlledBySwitchId": 1,
     "isBridgeInitiallyActive": false}
  ]
}
```

Layout rows are written top row first, so the LAST string is ``y = 0``.
Within a row, the longest definition key matching at the current string
index wins and fills ONE grid cell; otherwise the single character is read
through the fixed symbol table (``.`` floor, ``#`` wall, ``S`` start, ``E``
end, space for no tile). Unknown symbols are skipped with a warning.

Design philosophy:
- Levels are data (JSON), not code
- Structural problems (no Start, bad tile type, ambiguous keys) fail the load
  early with ``LevelLoadError`` so a player is never spawned on a broken board
- Cosmetic problems (unknown symbols) become warnings on ``board.warnings``

Usage:
    loader = LevelLoader()
    board = loader.load("01_first_steps")
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from .config import Config
from .logging_utils import log_info, log_warning
from .board import (
    Board,
    CompactLevel,
    Direction,
    LevelData,
    Tile,
    TileDefinition,
    TileKind,
    TileParameters,
    TileRecord,
)

LevelSource = Union[CompactLevel, LevelData, Mapping[str, Any]]

# Fixed single-character symbols used when no definition key matches.
# None marks "no tile": Air is never materialized.
SYMBOL_TABLE: Dict[str, Optional[TileKind]] = {
    ".": TileKind.FLOOR,
    "#": TileKind.WALL,
    "S": TileKind.START,
    "E": TileKind.END,
    " ": None,
}


class LevelLoadError(ValueError):
    """Raised when a level description cannot produce a playable board."""

    def __init__(self, reason: str, *, level_name: Optional[str] = None) -> None:
        self.reason = reason
        self.level_name = level_name
        where = f" '{level_name}'" if level_name else ""
        message = (
            f"Level{where} could not be loaded: {reason}\n\n"
            "Remediation tips:\n"
            "  - Every level needs exactly one 'S' (Start) tile\n"
            "  - Tile types must be one of: "
            + ", ".join(kind.value for kind in TileKind)
            + "\n"
            "  - Definition keys must be unique and non-empty"
        )
        super().__init__(message)


class LevelParser:
    """Convert level sources into boards, collecting non-fatal diagnostics.

    A parser instance accumulates ``warnings`` across one parse; create a new
    instance (or use the module-level helpers) per level.
    """

    def __init__(self, level_name: Optional[str] = None):
        self.level_name = level_name
        self.warnings: List[str] = []

    def parse(self, source: LevelSource) -> Board:
        """Build a board from any accepted source shape.

        Raw mappings containing a ``layout`` key are read as compact levels;
        other mappings as explicit tile records.
        """

        level = self.read_source(source)
        if isinstance(level, CompactLevel):
            level = self.expand(level)
        return self.build(level)

    def expand(self, compact: CompactLevel) -> LevelData:
        """Scan a compact layout into explicit tile records."""

        definitions = self._index_definitions(compact.definitions)
        # Longest keys first so the first match at a position is the longest.
        keys = sorted(definitions, key=len, reverse=True)
        start_direction = self._resolve_start_direction(compact.start_direction)

        if not compact.layout:
            raise LevelLoadError("layout is empty (zero rows)", level_name=self.level_name)

        height = len(compact.layout)
        max_grid_width = 0
        records: List[TileRecord] = []

        for y in range(height):
            row = compact.layout[height - 1 - y]
            grid_x = 0
            string_x = 0

            while string_x < len(row):
                matched_key = next((key for key in keys if row.startswith(key, string_x)), None)

                if matched_key is not None:
                    definition = definitions[matched_key]
                    records.append(
                        TileRecord(
                            position=(grid_x, y),
                            **definition.model_dump(exclude={"key"}),
                        )
                    )
                    string_x += len(matched_key)
                else:
                    symbol = row[string_x]
                    if symbol in SYMBOL_TABLE:
                        kind = SYMBOL_TABLE[symbol]
                        if kind is not None:
                            records.append(TileRecord(type=kind.value, position=(grid_x, y)))
                    else:
                        self._warn(
                            f"Unrecognized symbol '{symbol}' at string index {string_x} "
                            f"for grid position ({grid_x}, {y}); treated as no tile"
                        )
                    string_x += 1

                grid_x += 1
                max_grid_width = max(max_grid_width, grid_x)

        return LevelData(
            name=compact.name,
            description=compact.description,
            width=max_grid_width,
            height=height,
            tiles=records,
            start_direction=start_direction.name.title(),
            warnings=list(self.warnings),
        )

    def build(self, level: LevelData) -> Board:
        """Validate tile records and build a fully synchronized board."""

        if level.width <= 0 or level.height <= 0:
            raise LevelLoadError(
                f"board is {level.width}x{level.height}; both dimensions must be positive",
                level_name=self.level_name,
            )

        # Scan diagnostics from a separate expand() pass come first.
        self.warnings[:0] = [w for w in level.warnings if w not in self.warnings]
        start_direction = self._resolve_start_direction(level.start_direction)
        tiles = [self._make_tile(record) for record in level.tiles]

        starts = [tile for tile in tiles if tile.kind is TileKind.START]
        if not starts:
            raise LevelLoadError("no 'Start' tile found", level_name=self.level_name)
        if len(starts) > 1:
            positions = ", ".join(str(tile.position) for tile in starts)
            raise LevelLoadError(
                f"found {len(starts)} 'Start' tiles at {positions}; exactly one is allowed",
                level_name=self.level_name,
            )

        try:
            board = Board(
                level.width,
                level.height,
                tiles,
                start_direction=start_direction,
                warnings=self.warnings,
            )
        except ValueError as exc:
            raise LevelLoadError(str(exc), level_name=self.level_name) from exc

        # Initial flags never outlive the load: every bridge is immediately
        # re-derived from its switch.
        board.sync_all_switches()
        return board

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def read_source(self, source: LevelSource) -> Union[CompactLevel, LevelData]:
        if isinstance(source, (CompactLevel, LevelData)):
            return source
        if not isinstance(source, Mapping):
            raise LevelLoadError(
                f"unsupported level source type {type(source).__name__}",
                level_name=self.level_name,
            )
        try:
            if "layout" in source:
                return CompactLevel.model_validate(dict(source))
            return LevelData.model_validate(dict(source))
        except ValidationError as exc:
            raise LevelLoadError(f"invalid level data: {exc}", level_name=self.level_name) from exc

    def _index_definitions(self, definitions: List[TileDefinition]) -> Dict[str, TileDefinition]:
        indexed: Dict[str, TileDefinition] = {}
        for definition in definitions:
            if definition.key in indexed:
                # Two equal keys would make the longest-match scan ambiguous.
                raise LevelLoadError(
                    f"definition key '{definition.key}' is defined more than once",
                    level_name=self.level_name,
                )
            self._parse_kind(definition)
            indexed[definition.key] = definition
        return indexed

    def _parse_kind(self, params: TileParameters) -> TileKind:
        try:
            return TileKind.parse(params.type)
        except ValueError as exc:
            raise LevelLoadError(str(exc), level_name=self.level_name) from exc

    def _resolve_start_direction(self, raw: Optional[str]) -> Direction:
        if not raw:
            return Direction.UP
        try:
            return Direction.parse(raw)
        except ValueError:
            self._warn(f"Unknown startDirection '{raw}'; defaulting to Up")
            return Direction.UP

    def _make_tile(self, record: TileRecord) -> Tile:
        kind = self._parse_kind(record)
        tile = Tile(kind=kind, position=(record.position[0], record.position[1]))

        if kind is TileKind.SWITCH:
            tile.switch_id = record.switch_id
            tile.is_on = False
        elif kind is TileKind.BRIDGE:
            tile.controlled_by_switch_id = record.controlled_by_switch_id
            tile.activates_when_switch_on = record.activate_on_switch_on
            tile.initially_active = record.is_bridge_initially_active
            tile.is_active = record.is_bridge_initially_active
        elif kind is TileKind.WEAK_FLOOR:
            steps = record.initial_steps
            if steps <= 0:
                self._warn(
                    f"Weak floor at {tile.position} has initialSteps={steps}; using 1"
                )
                steps = 1
            tile.initial_steps = steps
            tile.steps_remaining = steps

        return tile

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        log_warning(f"[Level] {message}")


def parse_compact_level(level: CompactLevel) -> LevelData:
    """Scan a compact level into explicit tile records."""

    return LevelParser(level.name).expand(level)


def build_board(level: LevelData) -> Board:
    """Build a synchronized board from explicit tile records."""

    return LevelParser(level.name).build(level)


def load_board(source: LevelSource, *, level_name: Optional[str] = None) -> Board:
    """Build a board from a ``CompactLevel``, ``LevelData`` or raw mapping.

    Raises:
        LevelLoadError: If the source cannot produce a playable board
    """

    return LevelParser(level_name).parse(source)


class LevelLoader:
    """Load level files from a directory of ``{name}.json`` files.

    Directory structure:
    - Default: ``Config.LEVELS_DIR`` ({PROJECT_ROOT}/examples/levels)
    - Override via constructor: LevelLoader(Path("/custom/levels"))
    - Files whose name starts with ``_`` are ignored by ``list_levels``
    """

    def __init__(self, levels_dir: Optional[Path] = None):
        """Initialize level loader.

        Args:
            levels_dir: Directory containing level files.
                        Defaults to Config.LEVELS_DIR
        """
        self.levels_dir = Path(levels_dir) if levels_dir is not None else Config.LEVELS_DIR

    def load_source(self, level_name: str) -> Union[CompactLevel, LevelData]:
        """Read and validate a level file without building the board.

        Raises:
            FileNotFoundError: If the level file doesn't exist in levels_dir
            LevelLoadError: If the file is not valid JSON or fails validation
        """
        level_path = self.levels_dir / f"{level_name}.json"

        if not level_path.exists():
            raise FileNotFoundError(f"Level '{level_name}' not found at {level_path}")

        try:
            data = json.loads(level_path.read_text("utf-8"))
        except json.JSONDecodeError as exc:
            raise LevelLoadError(f"invalid JSON: {exc}", level_name=level_name) from exc

        if not isinstance(data, dict):
            raise LevelLoadError("top-level JSON value must be an object", level_name=level_name)

        data.setdefault("name", level_name)
        return LevelParser(level_name).read_source(data)

    def load(self, level_name: str) -> Board:
        """Load a level by name and build its board.

        Args:
            level_name: Name of level (without .json extension)

        Returns:
            A freshly built Board, ready for a player on its Start tile
        """
        source = self.load_source(level_name)
        board = LevelParser(level_name).parse(source)
        log_info(f"[Level] Loaded '{level_name}' ({board.width}x{board.height})")
        return board

    def list_levels(self) -> List[str]:
        """List level names in play order (sorted by file name)."""
        if not self.levels_dir.exists():
            return []

        return sorted(
            f.stem for f in self.levels_dir.glob("*.json")
            if not f.name.startswith("_")
        )

    def get_level_info(self, level_name: str) -> Dict[str, Any]:
        """Get level metadata without building the board."""
        source = self.load_source(level_name)
        if isinstance(source, CompactLevel):
            # Width counts grid cells, so multi-character keys need the scan.
            expanded = LevelParser(level_name).expand(source)
            return {
                "name": source.name or level_name,
                "description": source.description or "No description",
                "format": "compact",
                "width": expanded.width,
                "rows": expanded.height,
                "definitions": len(source.definitions),
            }
        return {
            "name": source.name or level_name,
            "description": source.description or "No description",
            "format": "records",
            "width": source.width,
            "rows": source.height,
            "definitions": 0,
        }


def load_level(level_name: str) -> Board:
    """Convenience function to load a level from the default directory."""
    loader = LevelLoader()
    return loader.load(level_name)
