"""Persisted player progress: solved puzzles, streaks and the selected difficulty.

Values are kept as JSON strings under fixed keys in a small key-value store,
so the same record shape works for a browser-style local storage or a file.
The progress transitions themselves are pure functions over ProgressRecord.
"""
from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol

from puzzles.puzzle_types import PuzzleId

logger = logging.getLogger(__name__)

PROGRESS_KEY = "tactics-progress"
DIFFICULTY_KEY = "selectedDifficulty"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store (tests, headless sessions)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _data_dir() -> Path:
    override = (os.getenv("PUZZLE_DATA_DIR") or "").strip()
    if override:
        p = Path(override)
    else:
        p = _repo_root() / "data"
    p.mkdir(parents=True, exist_ok=True)
    return p


class JsonFileStore:
    """Key-value store backed by a single JSON object on disk."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else _data_dir() / "local_storage.json"

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


@dataclass(frozen=True)
class ProgressRecord:
    solved_ids: tuple = ()
    streak: int = 0
    best_streak: int = 0

    def to_dict(self) -> dict:
        return {
            "solvedIds": list(self.solved_ids),
            "streak": self.streak,
            "bestStreak": self.best_streak,
        }

    @classmethod
    def from_dict(cls, data: object) -> ProgressRecord:
        """Lenient decode: each malformed field falls back to its default."""
        if not isinstance(data, dict):
            return cls()
        solved = data.get("solvedIds")
        return cls(
            solved_ids=tuple(solved) if isinstance(solved, list) else (),
            streak=_finite_int(data.get("streak")),
            best_streak=_finite_int(data.get("bestStreak")),
        )


def _finite_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value)


# =============================================================================
# TRANSITIONS
# =============================================================================


def record_success(progress: ProgressRecord, puzzle_id: PuzzleId) -> ProgressRecord:
    solved = list(progress.solved_ids)
    if puzzle_id not in solved:
        solved.append(puzzle_id)
    streak = progress.streak + 1
    return ProgressRecord(
        solved_ids=tuple(solved),
        streak=streak,
        best_streak=max(progress.best_streak, streak),
    )


def record_failure(progress: ProgressRecord) -> ProgressRecord:
    return ProgressRecord(progress.solved_ids, 0, progress.best_streak)


# Retrying a puzzle breaks the streak the same way a wrong move does.
record_retry = record_failure


# =============================================================================
# BOUNDARY
# =============================================================================


def load_progress(store: KeyValueStore) -> ProgressRecord:
    raw = store.get(PROGRESS_KEY)
    if not raw:
        return ProgressRecord()
    try:
        return ProgressRecord.from_dict(json.loads(raw))
    except ValueError:
        logger.warning("Discarding malformed progress record")
        return ProgressRecord()


def save_progress(store: KeyValueStore, progress: ProgressRecord) -> None:
    store.set(PROGRESS_KEY, json.dumps(progress.to_dict()))


def load_selected_difficulty(store: KeyValueStore) -> Optional[int]:
    raw = store.get(DIFFICULTY_KEY)
    if not raw:
        return None
    try:
        n = float(raw)
    except ValueError:
        return None
    return int(n) if math.isfinite(n) else None


def save_selected_difficulty(store: KeyValueStore, level: int) -> None:
    store.set(DIFFICULTY_KEY, str(int(level)))


class ProgressTracker:
    """Applies progress transitions and persists each result to ``store``."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.progress = load_progress(store)

    def _commit(self, progress: ProgressRecord) -> ProgressRecord:
        self.progress = progress
        save_progress(self.store, progress)
        return progress

    def on_success(self, puzzle_id: PuzzleId) -> ProgressRecord:
        return self._commit(record_success(self.progress, puzzle_id))

    def on_failure(self) -> ProgressRecord:
        return self._commit(record_failure(self.progress))

    def on_retry(self) -> ProgressRecord:
        return self._commit(record_retry(self.progress))
