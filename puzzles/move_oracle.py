"""
Move Oracle

Thin adapter over python-chess that answers legality questions for
square-to-square moves and applies them to a live position. Every applied
move is kept on the board's move stack, so the last move can always be undone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import chess

from puzzles.puzzle_types import MoveSpec


@dataclass(frozen=True)
class MoveResult:
    """Outcome of an applied move, used for history and sound selection."""

    uci: str
    san: str
    fen: str
    is_capture: bool
    is_check: bool
    is_checkmate: bool

    @property
    def sound(self) -> Optional[str]:
        """Sound cue for the move: capture, check, move, or None on mate."""
        if self.is_capture:
            return "capture"
        if self.is_checkmate:
            return None
        if self.is_check:
            return "check"
        return "move"


def _parse_square(name: str) -> Optional[int]:
    try:
        return chess.parse_square(str(name).strip().lower())
    except ValueError:
        return None


def _parse_piece(symbol: Optional[str]) -> Optional[int]:
    if not symbol:
        return None
    try:
        return chess.Piece.from_symbol(str(symbol).strip().lower()).piece_type
    except ValueError:
        return None


class MoveOracle:
    """Legal-move checks and position transitions for one live position."""

    def __init__(self, fen: str = chess.STARTING_FEN):
        self._board = chess.Board(fen)

    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def board(self) -> chess.Board:
        """A copy of the live board; mutate the oracle only through apply/undo."""
        return self._board.copy()

    @property
    def history(self) -> List[str]:
        """SAN of every move applied since the last load."""
        replay = self._board.root()
        out = []
        for move in self._board.move_stack:
            out.append(replay.san(move))
            replay.push(move)
        return out

    @property
    def can_undo(self) -> bool:
        return bool(self._board.move_stack)

    def legal_destinations(self, origin: str) -> List[str]:
        """Destination squares reachable from ``origin`` (for highlighting)."""
        square = _parse_square(origin)
        if square is None:
            return []
        return sorted(
            {chess.square_name(m.to_square) for m in self._board.legal_moves if m.from_square == square}
        )

    def find_move(self, spec: MoveSpec) -> Optional[chess.Move]:
        """
        Resolve ``spec`` to a legal move, or None when it is illegal.

        A promotion without a chosen piece resolves to a queen promotion.
        """
        origin = _parse_square(spec.origin)
        destination = _parse_square(spec.destination)
        if origin is None or destination is None:
            return None

        candidates = [
            m for m in self._board.legal_moves
            if m.from_square == origin and m.to_square == destination
        ]
        if not candidates:
            return None

        wanted = _parse_piece(spec.promotion)
        if any(m.promotion for m in candidates):
            target = wanted or chess.QUEEN
            for m in candidates:
                if m.promotion == target:
                    return m
            return None
        return candidates[0]

    def is_legal(self, spec: MoveSpec) -> bool:
        return self.find_move(spec) is not None

    def apply(self, spec: MoveSpec) -> Optional[MoveResult]:
        """Apply ``spec`` to the live position. Returns None (no change) if illegal."""
        move = self.find_move(spec)
        if move is None:
            return None

        is_capture = self._board.is_capture(move)
        san = self._board.san(move)
        self._board.push(move)
        return MoveResult(
            uci=move.uci(),
            san=san,
            fen=self._board.fen(),
            is_capture=is_capture,
            is_check=self._board.is_check(),
            is_checkmate=self._board.is_checkmate(),
        )

    def undo(self) -> str:
        """Take back the last applied move and return its UCI."""
        if not self._board.move_stack:
            raise IndexError("No move to undo")
        return self._board.pop().uci()
