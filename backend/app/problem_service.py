"""
Problem selection – one random puzzle row from a per-range CSV dataset.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

from puzzles.dataset import read_dataset, split_tokens, to_number
from puzzles.difficulty import (
    DEFAULT_RANGE,
    SUPPORTED_RANGE_KEYS,
    dataset_filename,
    normalize_range,
)

logger = logging.getLogger(__name__)


class ProblemServiceError(Exception):
    """Base error carrying the wire error code and HTTP status."""

    code = "server_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidRangeError(ProblemServiceError):
    code = "invalid_range"
    status_code = 400


class DatasetMissingError(ProblemServiceError):
    code = "not_found"


class EmptyDatasetError(ProblemServiceError):
    code = "empty"


def resolve_range(
    range_param: Optional[str] = None,
    min_rating: Optional[str] = None,
    max_rating: Optional[str] = None,
    default: str = DEFAULT_RANGE,
) -> str:
    """Normalized, supported range key for a request."""
    key = normalize_range(range_param, min_rating, max_rating) or default
    if key not in SUPPORTED_RANGE_KEYS:
        raise InvalidRangeError("Unsupported range")
    return key


def build_payload(row: dict, range_key: str, index: int) -> dict:
    """Wire payload for one dataset row; unparseable numbers are omitted."""
    payload = {
        "id": row.get("PuzzleId") or row.get("ID") or None,
        "fen": row.get("FEN", "").strip(),
        "moves": split_tokens(row.get("Moves")),
        "rating": to_number(row.get("Rating")),
        "rd": to_number(row.get("RatingDeviation")),
        "popularity": to_number(row.get("Popularity")),
        "plays": to_number(row.get("NbPlays")),
        "themes": split_tokens(row.get("Themes")),
        "gameUrl": (row.get("GameUrl") or "").strip() or None,
        "opening": (row.get("OpeningTags") or "").strip() or None,
        "range": range_key,
        "index": index,
    }
    return {k: v for k, v in payload.items() if v is not None}


class ProblemService:
    def __init__(self, problems_dir: Path, rng: Optional[random.Random] = None,
                 default_range: str = DEFAULT_RANGE):
        self.problems_dir = Path(problems_dir)
        self.rng = rng or random.Random()
        self.default_range = default_range

    def dataset_path(self, range_key: str) -> Path:
        return self.problems_dir / dataset_filename(range_key)

    def pick(
        self,
        range_param: Optional[str] = None,
        min_rating: Optional[str] = None,
        max_rating: Optional[str] = None,
    ) -> dict:
        range_key = resolve_range(range_param, min_rating, max_rating, self.default_range)
        path = self.dataset_path(range_key)
        try:
            rows = read_dataset(path)
        except OSError as e:
            logger.error("Problem dataset unreadable: %s (%s)", path, e)
            raise DatasetMissingError(f"Asset missing: {path.name}") from e

        if not rows:
            raise EmptyDatasetError("No problems available")

        index = self.rng.randrange(len(rows))
        return build_payload(rows[index], range_key, index)
