"""
Puzzle Manifest Builder

Scans a raw dataset directory, normalizes every puzzle-like record into the
minimal wire shape ``{id, fen, moves}``, groups records into difficulty
buckets and writes one manifest document:

    {"levels": [{"id": ..., "label": ...}, ...],
     "puzzles": {"<bucketId>": [{"id": ..., "fen": ..., "moves": [...]}, ...]}}

Raw files may be JSON (a list of puzzles, an object wrapping a ``puzzles``
list, or a single puzzle object) or CSV datasets with a header row.
Individual bad files and records are skipped with a warning; only failures
while writing the output abort the build.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from puzzles.dataset import parse_dataset
from puzzles.difficulty import RATING_BUCKETS, DifficultyBucket, bucket_for_rating

logger = logging.getLogger(__name__)

LOG_PREFIX = "[build-manifest]"

DATA_SUFFIXES = (".json", ".csv")


class ManifestWriteError(Exception):
    """Raised when the manifest or the dataset copy cannot be written."""


class ContainerShape(str, Enum):
    """How a raw file holds its puzzle records."""
    ARRAY = "array"        # [ {...}, {...} ]
    WRAPPED = "wrapped"    # {"puzzles": [ {...}, ... ]}
    SINGLE = "single"      # { "fen": ..., "moves": ... }
    UNKNOWN = "unknown"    # anything else: contributes no puzzles


class GroupingStrategy(str, Enum):
    FILENAME_RANGE = "filename-range"
    RATING_BUCKET = "rating-bucket"


# Logical field -> accepted raw keys, first present wins
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "position": ("fen", "FEN"),
    "moves": ("moves", "Moves"),
    "id": ("id", "PuzzleId", "ID"),
}

_RATING_RE = re.compile(r"(?<!\d)(\d{3,4})(?!\d)")
_RANGE_TOKEN_RE = re.compile(r"(\d+)to(\d+)")
_RANGE_KEY_RE = re.compile(r"^(\d+)-(\d+)$")


# =============================================================================
# RECORD NORMALIZATION
# =============================================================================


def resolve_field(raw: dict, name: str) -> Any:
    """Look up a logical field through its alias list."""
    for key in FIELD_ALIASES[name]:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _has_position(data: dict) -> bool:
    return resolve_field(data, "position") is not None


def classify_container(data: Any) -> ContainerShape:
    if isinstance(data, list):
        return ContainerShape.ARRAY
    if isinstance(data, dict):
        if isinstance(data.get("puzzles"), list):
            return ContainerShape.WRAPPED
        if _has_position(data):
            return ContainerShape.SINGLE
    return ContainerShape.UNKNOWN


def extract_raw_puzzles(data: Any) -> List[dict]:
    shape = classify_container(data)
    if shape == ContainerShape.ARRAY:
        items = data
    elif shape == ContainerShape.WRAPPED:
        items = data["puzzles"]
    elif shape == ContainerShape.SINGLE:
        items = [data]
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def normalize_moves(value: Any) -> List[str]:
    """A whitespace-delimited string or a token list -> list of move tokens."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        tokens: List[str] = []
        for item in value:
            if item is None:
                continue
            tokens.extend(str(item).split())
        return tokens
    return []


@dataclass(frozen=True)
class ManifestPuzzle:
    puzzle_id: str
    fen: str
    moves: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {"id": self.puzzle_id, "fen": self.fen, "moves": list(self.moves)}


def normalize_record(raw: dict, fallback_id: str) -> Optional[ManifestPuzzle]:
    """Map a raw record to the wire shape, or None when it is unusable."""
    fen = resolve_field(raw, "position")
    if not isinstance(fen, str) or not fen.strip():
        return None
    moves = normalize_moves(resolve_field(raw, "moves"))
    if not moves:
        return None
    puzzle_id = resolve_field(raw, "id")
    return ManifestPuzzle(
        puzzle_id=str(puzzle_id) if puzzle_id is not None else fallback_id,
        fen=fen.strip(),
        moves=tuple(moves),
    )


# =============================================================================
# GROUPING
# =============================================================================


def rating_from_filename(name: str) -> Optional[int]:
    """First standalone run of 3-4 digits in the file name."""
    m = _RATING_RE.search(Path(name).stem)
    return int(m.group(1)) if m else None


def range_key_from_filename(name: str) -> str:
    """``problem_1200to1500.json`` -> ``"1200-1500"``; no token -> the file stem."""
    stem = Path(name).stem
    m = _RANGE_TOKEN_RE.search(stem)
    if m:
        return f"{m.group(1)}-{m.group(2)}"
    return stem


def bucket_sort_key(key: str) -> tuple:
    """`lo-hi` keys ascending by lower bound, then every other key alphabetically."""
    m = _RANGE_KEY_RE.match(key)
    if m:
        return (0, int(m.group(1)), key)
    return (1, 0, key)


# =============================================================================
# MANIFEST
# =============================================================================


@dataclass
class Manifest:
    levels: List[dict] = field(default_factory=list)
    puzzles: Dict[str, List[ManifestPuzzle]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "levels": list(self.levels),
            "puzzles": {k: [p.to_dict() for p in v] for k, v in self.puzzles.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @property
    def total_puzzles(self) -> int:
        return sum(len(v) for v in self.puzzles.values())


@dataclass
class BuildReport:
    files_scanned: int = 0
    files_skipped: int = 0
    records_kept: int = 0
    records_dropped: int = 0
    written: List[Path] = field(default_factory=list)
    copied_to: Optional[Path] = None
    source_missing: bool = False


def discover_files(source: Path) -> List[Path]:
    """Every data file under ``source``, in relative POSIX path order."""
    files = [p for p in source.rglob("*") if p.is_file() and p.suffix.lower() in DATA_SUFFIXES]
    return sorted(files, key=lambda p: p.relative_to(source).as_posix())


def _read_raw_file(path: Path) -> List[dict]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".csv":
        return parse_dataset(text)
    return extract_raw_puzzles(json.loads(text))


class ManifestBuilder:
    def __init__(self, strategy: GroupingStrategy = GroupingStrategy.FILENAME_RANGE,
                 buckets: Sequence[DifficultyBucket] = RATING_BUCKETS):
        self.strategy = GroupingStrategy(strategy)
        self.buckets = tuple(buckets)

    def _bucket_for_file(self, path: Path) -> Optional[DifficultyBucket]:
        """Group for every record of ``path``; None drops the file's records."""
        if self.strategy == GroupingStrategy.RATING_BUCKET:
            return bucket_for_rating(rating_from_filename(path.name), self.buckets)
        key = range_key_from_filename(path.name)
        return DifficultyBucket(bucket_id=key, label=key, lower_bound=0)

    def collect(self, source: Path, report: Optional[BuildReport] = None) -> Manifest:
        """Scan ``source`` and group its records. Never raises for bad input files."""
        report = report if report is not None else BuildReport()
        grouped: Dict[str, List[ManifestPuzzle]] = {}
        labels: Dict[str, str] = {}

        if self.strategy == GroupingStrategy.RATING_BUCKET:
            for bucket in self.buckets:
                grouped[bucket.bucket_id] = []
                labels[bucket.bucket_id] = bucket.label

        for path in discover_files(source):
            report.files_scanned += 1
            try:
                raw_records = _read_raw_file(path)
            except (OSError, UnicodeDecodeError, ValueError, RecursionError) as e:
                report.files_skipped += 1
                logger.warning("%s Skipping malformed file %s: %s", LOG_PREFIX, path, e)
                continue

            bucket = self._bucket_for_file(path)
            if bucket is None:
                report.records_dropped += len(raw_records)
                logger.warning("%s No rating bucket for %s, dropping %d records",
                               LOG_PREFIX, path.name, len(raw_records))
                continue

            for i, raw in enumerate(raw_records):
                record = normalize_record(raw, fallback_id=f"{path.stem}-{i}")
                if record is None:
                    report.records_dropped += 1
                    logger.warning("%s Skipping record %d in %s: missing position or moves",
                                   LOG_PREFIX, i, path.name)
                    continue
                grouped.setdefault(bucket.bucket_id, []).append(record)
                labels.setdefault(bucket.bucket_id, bucket.label)
                report.records_kept += 1

        if self.strategy == GroupingStrategy.RATING_BUCKET:
            order = [b.bucket_id for b in self.buckets]
        else:
            order = sorted(grouped, key=bucket_sort_key)

        return Manifest(
            levels=[{"id": key, "label": labels[key]} for key in order],
            puzzles={key: grouped[key] for key in order},
        )


# =============================================================================
# OUTPUT
# =============================================================================


def write_manifest(manifest: Manifest, destinations: Iterable[Path]) -> List[Path]:
    payload = manifest.to_json()
    written = []
    for dest in destinations:
        dest = Path(dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise ManifestWriteError(f"Failed to write manifest to {dest}: {e}") from e
        logger.info("%s Wrote %d puzzles -> %s", LOG_PREFIX, manifest.total_puzzles, dest)
        written.append(dest)
    return written


def copy_dataset(source: Path, dest: Path) -> Path:
    """Copy the raw dataset directory verbatim for static serving."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise ManifestWriteError(f"Failed to copy {source} -> {dest}: {e}") from e
    logger.info("%s Copied %s -> %s", LOG_PREFIX, source, dest)
    return dest


def build_manifest(
    source: Path,
    output: Path,
    *,
    public_output: Optional[Path] = None,
    assets_dest: Optional[Path] = None,
    strategy: GroupingStrategy = GroupingStrategy.FILENAME_RANGE,
) -> BuildReport:
    """
    Run a full build: scan, group, write and copy.

    ``public_output`` is written only when its parent directory already
    exists. A missing ``source`` is not an error: nothing is written and the
    report has ``source_missing`` set.
    """
    report = BuildReport()
    source = Path(source)
    if not source.is_dir():
        logger.warning("%s Source not found: %s", LOG_PREFIX, source)
        report.source_missing = True
        return report

    manifest = ManifestBuilder(strategy).collect(source, report)

    destinations = [Path(output)]
    if public_output is not None and Path(public_output).parent.is_dir():
        destinations.append(Path(public_output))
    report.written = write_manifest(manifest, destinations)

    if assets_dest is not None:
        report.copied_to = copy_dataset(source, Path(assets_dest))

    logger.info(
        "%s %d files scanned, %d skipped, %d records kept, %d dropped",
        LOG_PREFIX, report.files_scanned, report.files_skipped,
        report.records_kept, report.records_dropped,
    )
    return report
