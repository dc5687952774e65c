from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import List, Optional

import chess

from puzzles.difficulty import DEFAULT_LEVEL
from puzzles.puzzle_types import (
    Puzzle,
    PuzzleFormatError,
    side_from_fen,
    turns_from_uci,
)

logger = logging.getLogger(__name__)

BUNDLED_DIR = Path(__file__).resolve().parent / "data"


def _sort_key(p: Puzzle) -> tuple:
    # Numeric ids first in numeric order, then the rest alphabetically
    try:
        return (0, float(p.puzzle_id), "")
    except (TypeError, ValueError):
        return (1, 0.0, str(p.puzzle_id))


def load_puzzle_file(path: Path) -> List[Puzzle]:
    """Decode an authored puzzle file holding one record or a list of records.

    Malformed records are skipped with a warning.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    records = data if isinstance(data, list) else [data]
    puzzles = []
    for record in records:
        try:
            puzzles.append(Puzzle.from_dict(record))
        except PuzzleFormatError as e:
            logger.warning("Skipping puzzle in %s: %s", path, e)
    return puzzles


def load_bundled_puzzles(directory: Optional[Path] = None) -> List[Puzzle]:
    """Load every authored puzzle under ``directory`` sorted by id."""
    directory = Path(directory) if directory else BUNDLED_DIR
    puzzles: List[Puzzle] = []
    for path in sorted(directory.glob("*.json")):
        try:
            puzzles.extend(load_puzzle_file(path))
        except (OSError, ValueError) as e:
            logger.warning("Skipping unreadable puzzle file %s: %s", path, e)
    return sorted(puzzles, key=_sort_key)


def puzzle_from_problem(payload: dict, range_key: str, level: int = DEFAULT_LEVEL) -> Puzzle:
    """Build a runtime puzzle from a /api/problem payload.

    The flat UCI move list is paired into turns; dialogue falls back to the
    default lines.
    """
    if not isinstance(payload, dict):
        raise PuzzleFormatError("Problem payload must be an object")
    fen = str(payload.get("fen") or "").strip()
    if not fen:
        raise PuzzleFormatError("Problem payload has no fen")
    try:
        chess.Board(fen)
    except ValueError as e:
        raise PuzzleFormatError(f"Problem payload has an invalid fen: {e}") from e

    moves = payload.get("moves")
    turns = turns_from_uci(moves if isinstance(moves, list) else [])
    if not turns:
        raise PuzzleFormatError("Problem payload has no usable moves")

    puzzle_id = payload.get("id")
    if puzzle_id in (None, ""):
        puzzle_id = f"{range_key}-{int(time.time() * 1000)}"

    return Puzzle(
        puzzle_id=puzzle_id,
        fen=fen,
        turns=turns,
        side_to_move=side_from_fen(fen),
        title=f"Tactics ({range_key})",
        difficulty=float(level),
        character_id=1,
    )


class PuzzleLibrary:
    """The bundled puzzle set, walked in a fixed rotation."""

    def __init__(self, puzzles: List[Puzzle]):
        if not puzzles:
            raise ValueError("Puzzle library is empty")
        self.puzzles = list(puzzles)

    @classmethod
    def bundled(cls, directory: Optional[Path] = None) -> PuzzleLibrary:
        return cls(load_bundled_puzzles(directory))

    def __len__(self) -> int:
        return len(self.puzzles)

    def __getitem__(self, index: int) -> Puzzle:
        return self.puzzles[index]

    def index_for_level(self, level: Optional[int]) -> int:
        """First puzzle authored for ``level``, or 0."""
        if level is None:
            return 0
        for i, p in enumerate(self.puzzles):
            if p.difficulty is not None and p.difficulty == float(level):
                return i
        return 0

    def next_index(self, current: int) -> int:
        return (current + 1) % len(self.puzzles)
