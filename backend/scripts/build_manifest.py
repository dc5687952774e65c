#!/usr/bin/env python3
"""
Build the puzzle manifest and publish the raw problem datasets.

Scans the raw dataset folder, groups puzzles into difficulty buckets and
writes manifest.json to the build output (and to public/ when present),
then copies the dataset folder to dist/_data/Chess_problems for the
problem endpoint.

Usage:
    python build_manifest.py [--source Chess_problems] [--strategy filename-range]

Exit status is 0 when the source folder is missing (nothing to build) and
1 only when writing the output fails.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add backend and repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from app.config import get_settings  # noqa: E402
from puzzles.manifest import GroupingStrategy, ManifestWriteError, build_manifest  # noqa: E402

logger = logging.getLogger("build_manifest")


def parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--source", type=Path, default=settings.problems_source_dir,
                        help="raw dataset folder")
    parser.add_argument("--out", type=Path, default=settings.manifest_path,
                        help="manifest path in the build output")
    parser.add_argument("--public", type=Path, default=settings.public_manifest_path,
                        help="manifest path under the static public folder (written if its folder exists)")
    parser.add_argument("--assets", type=Path, default=settings.problems_dir,
                        help="destination for the dataset copy")
    parser.add_argument("--strategy", choices=[s.value for s in GroupingStrategy],
                        default=GroupingStrategy.FILENAME_RANGE.value)
    parser.add_argument("--no-copy", action="store_true", help="skip copying the dataset folder")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(message)s")

    try:
        report = build_manifest(
            args.source,
            args.out,
            public_output=args.public,
            assets_dest=None if args.no_copy else args.assets,
            strategy=GroupingStrategy(args.strategy),
        )
    except ManifestWriteError as e:
        logger.error("[build-manifest] %s", e)
        return 1

    if report.source_missing:
        return 0
    logger.info("[build-manifest] Done: %d puzzles in %d files", report.records_kept, report.files_scanned)
    return 0


if __name__ == "__main__":
    sys.exit(main())
