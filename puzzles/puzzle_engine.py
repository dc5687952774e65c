"""
Puzzle Progression Engine

Drives a single puzzle attempt from load to completion:
- validates each attempted move with the move oracle
- compares it with the expected line
- plays the forced reply automatically
- reports a signal for the presentation layer after every transition

Wrong or illegal moves are never committed. A turn (player move plus
auto-reply) is applied atomically: if the reply cannot be played the player
move is undone and the attempt fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from puzzles.move_oracle import MoveOracle, MoveResult
from puzzles.progress_store import ProgressTracker
from puzzles.puzzle_types import MoveSpec, Puzzle, PuzzleStatus, SpeechKey, Turn

logger = logging.getLogger(__name__)


class SignalKind(str, Enum):
    """What happened on the last transition."""
    LOADED = "loaded"
    RESET = "reset"
    BLOCKED = "blocked"   # illegal move, nothing changed
    WRONG = "wrong"       # legal but not the expected move (or inconsistent data)
    CORRECT = "correct"   # turn completed, more remain
    SOLVED = "solved"     # last turn completed
    IGNORED = "ignored"   # attempt after the puzzle was already solved


@dataclass(frozen=True)
class EngineSignal:
    """
    Side effects of a transition, for the presentation layer to react to.

    ``sound`` is the cue to play: "blocked", "fail", "success", or the cue of
    the last committed move ("capture", "check", "move", None on mate).
    """
    kind: SignalKind
    status: PuzzleStatus
    speech: Optional[SpeechKey]
    message: str
    fen: str
    turn_index: int
    sound: Optional[str] = None
    hint: str = ""
    moves: Tuple[MoveResult, ...] = ()

    @property
    def committed(self) -> bool:
        return self.kind in (SignalKind.CORRECT, SignalKind.SOLVED)


def _promotion_matches(expected: MoveSpec, attempted: Optional[str]) -> bool:
    if not expected.promotion or not attempted:
        return True
    return expected.promotion.lower() == attempted.lower()


class PuzzleEngine:
    """Progression state for one puzzle attempt."""

    def __init__(self, puzzle: Puzzle, tracker: Optional[ProgressTracker] = None):
        self.tracker = tracker
        self.oracle = MoveOracle(puzzle.fen)
        self.puzzle = puzzle
        self.turn_index = 0
        self.status = PuzzleStatus.INTRO
        self.speech: Optional[SpeechKey] = SpeechKey.INTRO
        self.message = puzzle.line_for(SpeechKey.INTRO)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def fen(self) -> str:
        return self.oracle.fen

    @property
    def orientation(self) -> str:
        return self.puzzle.side_to_move

    @property
    def is_complete(self) -> bool:
        return self.turn_index >= len(self.puzzle.turns)

    @property
    def expected_turn(self) -> Optional[Turn]:
        if self.is_complete:
            return None
        return self.puzzle.turns[self.turn_index]

    @property
    def history(self):
        return self.oracle.history

    def _signal(self, kind: SignalKind, **kwargs) -> EngineSignal:
        return EngineSignal(
            kind=kind,
            status=self.status,
            speech=self.speech,
            message=self.message,
            fen=self.fen,
            turn_index=self.turn_index,
            **kwargs,
        )

    def _speak(self, key: SpeechKey) -> None:
        self.speech = key
        self.message = self.puzzle.line_for(key)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, puzzle: Puzzle, speech: SpeechKey = SpeechKey.INTRO) -> EngineSignal:
        """Replace the current puzzle and reinitialize every state field."""
        oracle = MoveOracle(puzzle.fen)
        self.puzzle = puzzle
        self.oracle = oracle
        self.turn_index = 0
        self.status = PuzzleStatus.INTRO
        self._speak(speech)
        logger.debug("Loaded puzzle %s (%d turns)", puzzle.puzzle_id, len(puzzle.turns))
        return self._signal(SignalKind.LOADED if speech == SpeechKey.INTRO else SignalKind.RESET)

    def reset(self) -> EngineSignal:
        """Restart the same puzzle from its starting position."""
        signal = self.load(self.puzzle, speech=SpeechKey.RETRY)
        if self.tracker is not None:
            self.tracker.on_retry()
        return signal

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def legal_destinations(self, origin: str) -> list:
        if self.status == PuzzleStatus.SUCCESS:
            return []
        return self.oracle.legal_destinations(origin)

    def _fail(self, turn: Turn) -> EngineSignal:
        self.status = PuzzleStatus.FAIL
        self._speak(SpeechKey.FAIL)
        if turn.hint:
            self.message = f"{self.message}\nHint: {turn.hint}"
        if self.tracker is not None:
            self.tracker.on_failure()
        return self._signal(SignalKind.WRONG, sound="fail", hint=turn.hint)

    def attempt(self, origin: str, destination: str, promotion: Optional[str] = None) -> EngineSignal:
        """
        Try a player move.

        Returns BLOCKED for illegal moves (no state change), WRONG for legal
        moves that leave the expected line, CORRECT/SOLVED when the turn
        (and its auto-reply) was committed.
        """
        if self.status == PuzzleStatus.SUCCESS:
            return self._signal(SignalKind.IGNORED)

        origin = str(origin).strip().lower()
        destination = str(destination).strip().lower()
        if not self.oracle.is_legal(MoveSpec(origin, destination)):
            return self._signal(SignalKind.BLOCKED, sound="blocked")

        turn = self.expected_turn
        if turn is None:
            return self._signal(SignalKind.IGNORED)

        expected = turn.player_move
        if (
            expected.origin != origin
            or expected.destination != destination
            or not _promotion_matches(expected, promotion)
        ):
            return self._fail(turn)

        player_result = self.oracle.apply(expected)
        if player_result is None:
            logger.warning(
                "Puzzle %s turn %d: expected move %s could not be applied",
                self.puzzle.puzzle_id, self.turn_index, expected.uci(),
            )
            return self._fail(turn)

        moves = [player_result]
        if turn.auto_reply is not None:
            reply_result = self.oracle.apply(turn.auto_reply)
            if reply_result is None:
                logger.warning(
                    "Puzzle %s turn %d: auto-reply %s is illegal, rolling back",
                    self.puzzle.puzzle_id, self.turn_index, turn.auto_reply.uci(),
                )
                self.oracle.undo()
                return self._fail(turn)
            moves.append(reply_result)

        self.turn_index += 1
        if self.is_complete:
            self.status = PuzzleStatus.SUCCESS
            self._speak(SpeechKey.SUCCESS)
            if self.tracker is not None:
                self.tracker.on_success(self.puzzle.puzzle_id)
            return self._signal(SignalKind.SOLVED, sound="success", moves=tuple(moves))

        self.status = PuzzleStatus.MID
        self._speak(SpeechKey.MID)
        return self._signal(SignalKind.CORRECT, sound=moves[-1].sound, moves=tuple(moves))
