"""
Chess Tactics Puzzle Module

Puzzle records, the progression engine that validates a player's moves
against a puzzle's expected line, the manifest builder for raw datasets,
and the persisted progress store.

Chess rules come from python-chess; nothing here reimplements them.
"""

from .puzzle_types import (
    DEFAULT_LINES,
    MoveSpec,
    Puzzle,
    PuzzleFormatError,
    PuzzleStatus,
    SpeechKey,
    Turn,
    turns_from_uci,
)
from .difficulty import (
    DEFAULT_RANGE,
    SUPPORTED_RANGE_KEYS,
    DifficultyBucket,
    bucket_for_rating,
    normalize_range,
    range_for_level,
)
from .move_oracle import MoveOracle, MoveResult
from .puzzle_engine import EngineSignal, PuzzleEngine, SignalKind
from .progress_store import (
    JsonFileStore,
    MemoryStore,
    ProgressRecord,
    ProgressTracker,
    load_progress,
    save_progress,
)
from .puzzle_store import PuzzleLibrary, load_bundled_puzzles, puzzle_from_problem
from .puzzle_feed import FeedResult, PuzzleFeed
from .puzzle_session import PuzzleSession
from .manifest import (
    GroupingStrategy,
    Manifest,
    ManifestBuilder,
    ManifestWriteError,
    build_manifest,
)

__all__ = [
    # Types
    "DEFAULT_LINES",
    "MoveSpec",
    "Puzzle",
    "PuzzleFormatError",
    "PuzzleStatus",
    "SpeechKey",
    "Turn",
    "DifficultyBucket",
    "MoveResult",
    "EngineSignal",
    "SignalKind",
    "ProgressRecord",
    "FeedResult",
    "Manifest",
    "GroupingStrategy",
    # Functions
    "turns_from_uci",
    "bucket_for_rating",
    "normalize_range",
    "range_for_level",
    "load_progress",
    "save_progress",
    "load_bundled_puzzles",
    "puzzle_from_problem",
    "build_manifest",
    # Classes
    "MoveOracle",
    "PuzzleEngine",
    "JsonFileStore",
    "MemoryStore",
    "ProgressTracker",
    "PuzzleLibrary",
    "PuzzleFeed",
    "PuzzleSession",
    "ManifestBuilder",
    "ManifestWriteError",
    # Constants
    "DEFAULT_RANGE",
    "SUPPORTED_RANGE_KEYS",
]
