"""
Puzzle Session

Ties one progression engine to the puzzle feed and the progress store:
- starts on the bundled puzzle matching the selected difficulty
- forwards attempts and retries to the engine
- loads the next puzzle only once the current one is solved or failed
"""

from __future__ import annotations

import logging
from typing import Optional

from puzzles.progress_store import KeyValueStore, MemoryStore, ProgressTracker
from puzzles.puzzle_engine import EngineSignal, PuzzleEngine
from puzzles.puzzle_feed import PuzzleFeed
from puzzles.puzzle_store import PuzzleLibrary
from puzzles.puzzle_types import PuzzleStatus

logger = logging.getLogger(__name__)


class PuzzleSession:
    def __init__(
        self,
        library: PuzzleLibrary,
        feed: Optional[PuzzleFeed] = None,
        store: Optional[KeyValueStore] = None,
    ):
        self.library = library
        self.store = store if store is not None else MemoryStore()
        self.feed = feed
        self.tracker = ProgressTracker(self.store)
        self.library_index = feed.first_index() if feed is not None else 0
        self.engine = PuzzleEngine(self.library[self.library_index], tracker=self.tracker)
        self.source = "local"

    @property
    def progress(self):
        return self.tracker.progress

    @property
    def can_advance(self) -> bool:
        return self.engine.status in (PuzzleStatus.SUCCESS, PuzzleStatus.FAIL)

    def attempt(self, origin: str, destination: str, promotion: Optional[str] = None) -> EngineSignal:
        return self.engine.attempt(origin, destination, promotion)

    def retry(self) -> EngineSignal:
        return self.engine.reset()

    def next_puzzle(self) -> Optional[EngineSignal]:
        """Load the next puzzle; None while the current one is unresolved."""
        if not self.can_advance:
            return None

        if self.feed is None:
            return self._load_local()

        result = self.feed.next_puzzle(self.library_index)
        if result.source == "remote":
            try:
                signal = self.engine.load(result.puzzle)
            except ValueError as e:
                logger.warning("Remote puzzle %s could not be loaded, using local rotation: %s",
                               result.puzzle.puzzle_id, e)
                return self._load_local()
            self.source = "remote"
            return signal

        self.library_index = result.library_index
        self.source = "local"
        return self.engine.load(result.puzzle)

    def _load_local(self) -> EngineSignal:
        self.library_index = self.library.next_index(self.library_index)
        self.source = "local"
        return self.engine.load(self.library[self.library_index])
