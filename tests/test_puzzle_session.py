import requests

from puzzles.progress_store import MemoryStore, load_progress, save_selected_difficulty
from puzzles.puzzle_feed import FeedResult, PuzzleFeed
from puzzles.puzzle_session import PuzzleSession
from puzzles.puzzle_store import PuzzleLibrary
from puzzles.puzzle_types import Puzzle, PuzzleStatus, turns_from_uci

from tests.test_puzzle_feed import FakeResponse, FakeSession
from tests.conftest import START_FEN


def test_next_is_gated_until_resolved():
    session = PuzzleSession(PuzzleLibrary.bundled())
    assert session.engine.puzzle.puzzle_id == 1
    assert not session.can_advance
    assert session.next_puzzle() is None

    session.attempt("a1", "b1")
    assert session.engine.status == PuzzleStatus.FAIL
    assert session.can_advance

    signal = session.next_puzzle()
    assert signal is not None
    assert session.engine.puzzle.puzzle_id == 2
    assert session.library_index == 1
    assert session.source == "local"
    assert not session.can_advance


def test_solve_then_advance_records_progress():
    store = MemoryStore()
    session = PuzzleSession(PuzzleLibrary.bundled(), store=store)

    session.attempt("a1", "a8")
    assert session.engine.status == PuzzleStatus.SUCCESS
    assert session.progress.solved_ids == (1,)
    assert load_progress(store).streak == 1

    session.next_puzzle()
    session.retry()
    assert load_progress(store).streak == 0
    assert load_progress(store).best_streak == 1


def test_starts_at_selected_difficulty_and_uses_feed():
    store = MemoryStore()
    save_selected_difficulty(store, 3)
    library = PuzzleLibrary.bundled()
    http = FakeSession(FakeResponse({"id": "r9", "fen": START_FEN, "moves": ["e2e4", "e7e5"]}))
    feed = PuzzleFeed(library, "http://api.test", store, session=http)

    session = PuzzleSession(library, feed=feed, store=store)
    assert session.engine.puzzle.puzzle_id == 3

    session.attempt("h1", "h2")  # illegal: blocked, still unresolved
    assert session.next_puzzle() is None

    session.attempt("a1", "a2")
    session.next_puzzle()
    assert session.source == "remote"
    assert session.engine.puzzle.puzzle_id == "r9"
    assert session.library_index == 2

    session.attempt("e2", "e4")
    http.error = requests.ConnectionError("offline")
    session.next_puzzle()
    assert session.source == "local"
    assert session.engine.puzzle.puzzle_id == 4


def test_bad_remote_position_falls_back_with_consistent_board():
    library = PuzzleLibrary.bundled()
    http = FakeSession(FakeResponse({"id": "x", "fen": "not a fen", "moves": ["e2e4", "e7e5"]}))
    session = PuzzleSession(library, feed=PuzzleFeed(library, "http://api.test", session=http))

    session.attempt("a1", "b1")
    signal = session.next_puzzle()

    assert session.source == "local"
    assert session.engine.puzzle.puzzle_id == 2
    assert session.engine.fen == library[1].fen
    assert signal.fen == library[1].fen


class UnloadableFeed:
    """Feed that hands back a remote puzzle the engine cannot set up."""

    def __init__(self, puzzle):
        self.puzzle = puzzle

    def first_index(self):
        return 0

    def next_puzzle(self, current_index):
        return FeedResult(puzzle=self.puzzle, source="remote", library_index=current_index)


def test_remote_puzzle_that_fails_to_load_uses_local_rotation(caplog):
    library = PuzzleLibrary.bundled()
    broken = Puzzle(puzzle_id="bad", fen="not a fen", turns=turns_from_uci(["e2e4"]))
    session = PuzzleSession(library, feed=UnloadableFeed(broken))

    session.attempt("a1", "b1")
    session.next_puzzle()

    assert session.source == "local"
    assert session.library_index == 1
    assert session.engine.puzzle.puzzle_id == 2
    assert session.engine.fen == library[1].fen
    assert "could not be loaded" in caplog.text
