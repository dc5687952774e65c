import pytest
import requests

from puzzles.progress_store import MemoryStore, save_selected_difficulty
from puzzles.puzzle_feed import PuzzleFeed
from puzzles.puzzle_store import PuzzleLibrary

from tests.conftest import START_FEN


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture()
def library():
    return PuzzleLibrary.bundled()


def test_remote_puzzle_for_selected_level(library):
    store = MemoryStore()
    save_selected_difficulty(store, 2)
    session = FakeSession(FakeResponse({
        "id": "r1", "fen": START_FEN, "moves": ["e2e4", "e7e5"], "range": "1200-1500", "index": 0,
    }))
    feed = PuzzleFeed(library, "http://api.test/", store, session=session, timeout=2.0)

    result = feed.next_puzzle(1)

    assert result.source == "remote"
    assert result.library_index == 1
    assert result.puzzle.puzzle_id == "r1"
    assert result.puzzle.title == "Tactics (1200-1500)"

    url, kwargs = session.calls[0]
    assert url == "http://api.test/api/problem"
    assert kwargs["params"] == {"range": "1200-1500"}
    assert kwargs["headers"] == {"Cache-Control": "no-store"}
    assert kwargs["timeout"] == 2.0


def test_default_level_without_selection(library):
    session = FakeSession(FakeResponse({"id": "r1", "fen": START_FEN, "moves": ["e2e4"]}))
    feed = PuzzleFeed(library, "http://api.test", session=session)
    feed.next_puzzle(0)
    assert session.calls[0][1]["params"] == {"range": "1500-1800"}


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("offline")),
        FakeSession(error=requests.Timeout("slow")),
        FakeSession(FakeResponse({"error": "empty"}, status_code=500)),
        FakeSession(FakeResponse(ValueError("not json"))),
        FakeSession(FakeResponse({"id": "r1", "fen": START_FEN, "moves": []})),
        FakeSession(FakeResponse({"id": "x", "fen": "not a fen", "moves": ["e2e4", "e7e5"]})),
    ],
)
def test_any_failure_falls_back_to_rotation(library, session, caplog):
    feed = PuzzleFeed(library, "http://api.test", session=session)

    result = feed.next_puzzle(1)

    assert result.source == "local"
    assert result.library_index == 2
    assert result.puzzle is library[2]
    assert len(session.calls) == 1
    assert "using local rotation" in caplog.text


def test_rotation_wraps(library):
    feed = PuzzleFeed(library, "http://api.test", session=FakeSession(error=requests.ConnectionError()))
    assert feed.next_puzzle(len(library) - 1).library_index == 0


def test_first_index_follows_selected_level(library):
    store = MemoryStore()
    feed = PuzzleFeed(library, "http://api.test", store, session=FakeSession())
    assert feed.first_index() == 0

    save_selected_difficulty(store, 4)
    assert feed.first_index() == 3
    assert feed.selected_level() == 4


def test_unplayable_position_is_not_served_as_remote(library):
    session = FakeSession(FakeResponse({"id": "x", "fen": "not a fen", "moves": ["e2e4", "e7e5"]}))
    feed = PuzzleFeed(library, "http://api.test", session=session)

    result = feed.next_puzzle(0)

    assert result.source == "local"
    assert result.puzzle.puzzle_id == 2
