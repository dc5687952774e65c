"""
Puzzle Dataset Parser

Reads the per-range CSV datasets (Lichess puzzle export columns):

    PuzzleId, FEN, Moves, Rating, RatingDeviation, Popularity, NbPlays,
    Themes, GameUrl, OpeningTags, ID

The header row defines the field order. Parsing is quote-aware, so fields
may contain commas when quoted. Rows without both a FEN and a move list are
excluded.
"""

from __future__ import annotations

import io
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

REQUIRED_FIELDS = ("FEN", "Moves")

Number = Union[int, float]


def parse_dataset(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into one dict per usable row, keyed by header name."""
    if not text or not text.strip():
        return []
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
            index_col=False,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError:
        return []

    df.columns = [str(c).strip() for c in df.columns]
    if any(col not in df.columns for col in REQUIRED_FIELDS):
        return []

    df = df.fillna("")
    usable = df["FEN"].str.strip().ne("") & df["Moves"].str.strip().ne("")
    return df[usable].to_dict(orient="records")


def read_dataset(path: Path) -> List[Dict[str, str]]:
    """Read and parse a dataset file. Raises OSError if it cannot be read."""
    with Path(path).open("r", encoding="utf-8") as f:
        return parse_dataset(f.read())


def to_number(value: object) -> Optional[Number]:
    """Parse a numeric field; None when blank or not a finite number."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        n = float(text)
    except ValueError:
        return None
    if not math.isfinite(n):
        return None
    return int(n) if n.is_integer() else n


def split_tokens(value: object) -> List[str]:
    """Whitespace-split a field, dropping empty tokens."""
    return str(value or "").split()
