"""
Puzzle Data Types and Schemas

Defines the authored puzzle record, its turns and the progression states.
All types are serializable to the JSON shape written by the admin editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
import json

import chess


class PuzzleFormatError(ValueError):
    """Raised when a puzzle record cannot be decoded into a playable puzzle."""


class PuzzleStatus(str, Enum):
    """
    Progression states of a single puzzle attempt.

    - INTRO: just loaded (or reset)
    - MID: at least one turn completed, more remain
    - SUCCESS: every turn completed (terminal until reset/reload)
    - FAIL: last attempt was wrong; the player may keep trying
    """
    INTRO = "intro"
    MID = "mid"
    SUCCESS = "success"
    FAIL = "fail"


class SpeechKey(str, Enum):
    """Narrative text slots a puzzle may override."""
    INTRO = "intro"
    MID = "mid"
    SUCCESS = "success"
    FAIL = "fail"
    RETRY = "retry"


DEFAULT_LINES = {
    SpeechKey.INTRO: "Alright, let's warm up with this position!",
    SpeechKey.MID: "Great rhythm! Stay focused until the end!",
    SpeechKey.SUCCESS: "Brilliant! That was a beautiful tactic!",
    SpeechKey.FAIL: "Hmm... let's focus and try once more!",
    SpeechKey.RETRY: "Position reset. Give it another shot!",
}

PuzzleId = Union[str, int]

_SPEECH_KEYS = frozenset(k.value for k in SpeechKey)


def side_from_fen(fen: str) -> str:
    """Return "white" or "black" from the FEN side-to-move field."""
    parts = str(fen).split()
    return "black" if len(parts) > 1 and parts[1] == "b" else "white"


@dataclass(frozen=True)
class MoveSpec:
    """A move given as origin/destination squares plus optional promotion piece."""

    origin: str
    destination: str
    promotion: Optional[str] = None

    @classmethod
    def from_uci(cls, uci: str) -> Optional[MoveSpec]:
        """Parse "e7e8q" style tokens. Returns None for tokens shorter than 4 chars."""
        if not isinstance(uci, str) or len(uci) < 4:
            return None
        promo = uci[4].lower() if len(uci) >= 5 else None
        return cls(origin=uci[0:2].lower(), destination=uci[2:4].lower(), promotion=promo)

    def uci(self) -> str:
        return f"{self.origin}{self.destination}{self.promotion or ''}"

    def to_dict(self) -> dict:
        data = {"from": self.origin, "to": self.destination}
        if self.promotion:
            data["promotion"] = self.promotion
        return data

    @classmethod
    def from_dict(cls, data: dict) -> MoveSpec:
        if not isinstance(data, dict):
            raise PuzzleFormatError(f"Move must be an object, got {type(data).__name__}")
        origin = str(data.get("from") or "").strip().lower()
        destination = str(data.get("to") or "").strip().lower()
        if origin not in chess.SQUARE_NAMES or destination not in chess.SQUARE_NAMES:
            raise PuzzleFormatError(f"Invalid move squares: {data!r}")
        promotion = data.get("promotion")
        return cls(
            origin=origin,
            destination=destination,
            promotion=str(promotion).lower() if promotion else None,
        )


@dataclass(frozen=True)
class Turn:
    """One step of the expected line: the player's move and the forced reply."""

    player_move: MoveSpec
    auto_reply: Optional[MoveSpec] = None
    hint: str = ""

    def to_dict(self) -> dict:
        data = {"player": self.player_move.to_dict(), "hint": self.hint}
        if self.auto_reply is not None:
            data["reply"] = self.auto_reply.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Turn:
        if not isinstance(data, dict) or "player" not in data:
            raise PuzzleFormatError(f"Turn is missing its player move: {data!r}")
        reply = data.get("reply")
        return cls(
            player_move=MoveSpec.from_dict(data["player"]),
            auto_reply=MoveSpec.from_dict(reply) if reply else None,
            hint=str(data.get("hint") or ""),
        )


def turns_from_uci(moves: List[str]) -> List[Turn]:
    """
    Pair a flat UCI line [p1, r1, p2, r2, ...] into turns.

    Even indices are player moves, the following odd index is the auto-reply.
    Pairing stops at the first unparseable player token.
    """
    turns: List[Turn] = []
    moves = list(moves or [])
    for i in range(0, len(moves), 2):
        player = MoveSpec.from_uci(moves[i])
        if player is None:
            break
        reply = MoveSpec.from_uci(moves[i + 1]) if i + 1 < len(moves) else None
        turns.append(Turn(player_move=player, auto_reply=reply))
    return turns


@dataclass
class Puzzle:
    """
    A single tactics problem.

    Serialized with the field names used by authored puzzle files
    (fen, side, characterId, dialogue, turns).
    """
    # Stable identifier within a dataset
    puzzle_id: PuzzleId

    # Starting position
    fen: str

    # Expected line of turns; never empty for a playable puzzle
    turns: List[Turn]

    # "white" or "black"; always agrees with the FEN
    side_to_move: str = "white"

    title: str = ""
    difficulty: Optional[float] = None
    character_id: int = 1

    # Narrative overrides keyed by SpeechKey value; missing keys use DEFAULT_LINES
    dialogue: dict = field(default_factory=dict)

    def line_for(self, key: SpeechKey) -> str:
        return self.dialogue.get(key.value) or DEFAULT_LINES[key]

    def to_dict(self) -> dict:
        """Convert to the authored JSON shape."""
        data = {
            "id": self.puzzle_id,
            "title": self.title,
            "fen": self.fen,
            "side": self.side_to_move,
            "characterId": self.character_id,
            "dialogue": {key.value: self.dialogue.get(key.value, "") for key in SpeechKey},
            "turns": [t.to_dict() for t in self.turns],
        }
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Puzzle:
        """Create Puzzle from an authored record, validating the invariants."""
        if not isinstance(data, dict):
            raise PuzzleFormatError("Puzzle record must be an object")
        if data.get("id") in (None, ""):
            raise PuzzleFormatError("Puzzle record has no id")

        fen = str(data.get("fen") or "").strip()
        if not fen:
            raise PuzzleFormatError(f"Puzzle {data['id']!r} has no fen")
        try:
            chess.Board(fen)
        except ValueError as e:
            raise PuzzleFormatError(f"Puzzle {data['id']!r} has an invalid fen: {e}") from e

        fen_side = side_from_fen(fen)
        side = data.get("side") or fen_side
        if side != fen_side:
            raise PuzzleFormatError(
                f"Puzzle {data['id']!r}: side {side!r} disagrees with fen ({fen_side})"
            )

        turns = [Turn.from_dict(t) for t in (data.get("turns") or [])]
        if not turns:
            raise PuzzleFormatError(f"Puzzle {data['id']!r} has no turns")

        dialogue = data.get("dialogue") or {}
        if not isinstance(dialogue, dict):
            dialogue = {}

        try:
            character_id = int(data.get("characterId") or 1)
        except (TypeError, ValueError) as e:
            raise PuzzleFormatError(f"Puzzle {data['id']!r} has an invalid characterId: {e}") from e

        difficulty = data.get("difficulty")
        try:
            difficulty = float(difficulty) if difficulty is not None else None
        except (TypeError, ValueError):
            difficulty = None

        return cls(
            puzzle_id=data["id"],
            fen=fen,
            turns=turns,
            side_to_move=side,
            title=str(data.get("title") or ""),
            difficulty=difficulty,
            character_id=character_id,
            dialogue={k: str(v) for k, v in dialogue.items() if k in _SPEECH_KEYS and v},
        )

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
