"""
Difficulty Ranges Module

Rating ranges shared by the manifest builder, the problem endpoint and the
player-facing difficulty levels. Deterministic lookups only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# SUPPORTED RANGES
# =============================================================================
# One CSV dataset exists per range. The last range is capped at 4000 on the
# wire but treated as open-ended when bucketing ratings.

SUPPORTED_RANGES: tuple[tuple[int, int], ...] = (
    (900, 1200),
    (1200, 1500),
    (1500, 1800),
    (1800, 2100),
    (2100, 2400),
    (2400, 4000),
)

DEFAULT_RANGE = "1500-1800"
DEFAULT_LEVEL = 3

_RANGE_TOKEN_RE = re.compile(r"^(\d{3,4})-(\d{3,4})$")


def range_key(lo: int, hi: int) -> str:
    return f"{lo}-{hi}"


SUPPORTED_RANGE_KEYS: tuple[str, ...] = tuple(range_key(lo, hi) for lo, hi in SUPPORTED_RANGES)

# Difficulty level (star count on the select screen) -> range key
LEVEL_RANGES: dict[int, str] = {
    level: key for level, key in enumerate(SUPPORTED_RANGE_KEYS, start=1)
}


def range_for_level(level: Optional[int]) -> str:
    """Map a 1..6 difficulty level to its range key (level 3 when unknown)."""
    try:
        return LEVEL_RANGES[int(level)]
    except (TypeError, ValueError, KeyError):
        return LEVEL_RANGES[DEFAULT_LEVEL]


def dataset_filename(key: str) -> str:
    """`"900-1200"` -> `"problem_900to1200.csv"`."""
    lo, hi = key.split("-", 1)
    return f"problem_{lo}to{hi}.csv"


def _to_number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(str(value).strip())
    except ValueError:
        return None
    if n != n or n in (float("inf"), float("-inf")):
        return None
    return n


def normalize_range(
    range_param: Optional[str] = None,
    min_rating: object = None,
    max_rating: object = None,
) -> Optional[str]:
    """
    Normalize a rating-range request to a range key.

    An explicit ``"lo-hi"`` token is returned as written, even when it is not
    one of the supported keys (the caller rejects it). Otherwise ``min`` and
    ``max`` snap to the smallest supported range containing both. Returns
    None when nothing usable was supplied.
    """
    if range_param:
        m = _RANGE_TOKEN_RE.match(str(range_param).strip())
        if m:
            return range_key(int(m.group(1)), int(m.group(2)))

    lo = _to_number(min_rating)
    hi = _to_number(max_rating)
    if lo is not None and hi is not None:
        for b_lo, b_hi in SUPPORTED_RANGES:
            if lo >= b_lo and hi <= b_hi:
                return range_key(b_lo, b_hi)
    return None


# =============================================================================
# RATING BUCKETS
# =============================================================================


@dataclass(frozen=True)
class DifficultyBucket:
    """A rating bucket: lower bound inclusive, upper bound exclusive (None = open)."""

    bucket_id: str
    label: str
    lower_bound: int
    upper_bound: Optional[int] = None

    def contains(self, rating: float) -> bool:
        if rating < self.lower_bound:
            return False
        return self.upper_bound is None or rating < self.upper_bound


def _build_rating_buckets() -> tuple[DifficultyBucket, ...]:
    buckets = []
    for i, (lo, hi) in enumerate(SUPPORTED_RANGES):
        if i == len(SUPPORTED_RANGES) - 1:
            buckets.append(DifficultyBucket(f"{lo}+", f"{lo}+", lo, None))
        else:
            key = range_key(lo, hi)
            buckets.append(DifficultyBucket(key, key, lo, hi))
    return tuple(buckets)


RATING_BUCKETS: tuple[DifficultyBucket, ...] = _build_rating_buckets()


def bucket_for_rating(
    rating: Optional[float],
    buckets: tuple[DifficultyBucket, ...] = RATING_BUCKETS,
) -> Optional[DifficultyBucket]:
    """Return the single bucket containing ``rating``, or None if out of range."""
    if rating is None:
        return None
    for bucket in buckets:
        if bucket.contains(rating):
            return bucket
    return None
