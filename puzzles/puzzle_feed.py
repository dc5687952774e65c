"""Next-puzzle source: the remote problem endpoint, falling back to the bundled set.

One request per call, no retry. Any failure (network, HTTP status, payload)
moves to the next bundled puzzle in rotation instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from puzzles.difficulty import DEFAULT_LEVEL, range_for_level
from puzzles.progress_store import KeyValueStore, load_selected_difficulty
from puzzles.puzzle_store import PuzzleLibrary, puzzle_from_problem
from puzzles.puzzle_types import Puzzle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class FeedResult:
    puzzle: Puzzle
    # "remote" or "local"
    source: str
    # Position in the bundled library (unchanged when the puzzle came from the API)
    library_index: int


class PuzzleFeed:
    def __init__(
        self,
        library: PuzzleLibrary,
        base_url: str,
        store: Optional[KeyValueStore] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.library = library
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.timeout = timeout
        self.session = session or requests.Session()

    def selected_level(self) -> int:
        level = load_selected_difficulty(self.store) if self.store is not None else None
        return level or DEFAULT_LEVEL

    def first_index(self) -> int:
        """Library index to start from, honoring the selected difficulty."""
        level = load_selected_difficulty(self.store) if self.store is not None else None
        return self.library.index_for_level(level)

    def fetch_remote(self, level: int) -> Puzzle:
        range_key = range_for_level(level)
        resp = self.session.get(
            f"{self.base_url}/api/problem",
            params={"range": range_key},
            headers={"Cache-Control": "no-store"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return puzzle_from_problem(resp.json(), range_key, level)

    def next_puzzle(self, current_index: int) -> FeedResult:
        level = self.selected_level()
        try:
            puzzle = self.fetch_remote(level)
            return FeedResult(puzzle=puzzle, source="remote", library_index=current_index)
        except (requests.RequestException, ValueError) as e:
            # PuzzleFormatError and JSON decode errors are ValueErrors
            logger.warning("Problem fetch failed, using local rotation: %s", e)

        index = self.library.next_index(current_index)
        return FeedResult(puzzle=self.library[index], source="local", library_index=index)
