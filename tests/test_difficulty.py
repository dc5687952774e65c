import pytest

from puzzles.difficulty import (
    DEFAULT_RANGE,
    RATING_BUCKETS,
    SUPPORTED_RANGE_KEYS,
    bucket_for_rating,
    dataset_filename,
    normalize_range,
    range_for_level,
)


@pytest.mark.parametrize(
    "args, expected",
    [
        (("900-1200", None, None), "900-1200"),
        ((" 2400-4000 ", None, None), "2400-4000"),
        # literal tokens pass through; the caller rejects unsupported ones
        (("1000-1300", None, None), "1000-1300"),
        ((None, "1000", "1100"), "900-1200"),
        ((None, 1200, 1500), "1200-1500"),
        ((None, "1250", "1600"), None),
        (("easy", "1900", "2000"), "1800-2100"),
        ((None, "2500", "3900"), "2400-4000"),
        ((None, "800", "1000"), None),
        ((None, "abc", "1000"), None),
        ((None, "1000", None), None),
        ((None, None, None), None),
    ],
)
def test_normalize_range(args, expected):
    assert normalize_range(*args) == expected


def test_range_for_level():
    assert range_for_level(1) == "900-1200"
    assert range_for_level(6) == "2400-4000"
    assert range_for_level("2") == "1200-1500"
    assert range_for_level(None) == DEFAULT_RANGE
    assert range_for_level(0) == DEFAULT_RANGE
    assert range_for_level(7) == DEFAULT_RANGE


def test_dataset_filename():
    assert dataset_filename("900-1200") == "problem_900to1200.csv"
    assert [dataset_filename(k) for k in SUPPORTED_RANGE_KEYS][-1] == "problem_2400to4000.csv"


def test_rating_buckets_are_exclusive():
    for rating in (900, 1199, 1200, 1499.5, 1500, 2399, 2400, 3200):
        matches = [b for b in RATING_BUCKETS if b.contains(rating)]
        assert len(matches) == 1, rating

    assert bucket_for_rating(1200).bucket_id == "1200-1500"
    assert bucket_for_rating(1199).bucket_id == "900-1200"
    assert bucket_for_rating(5000).bucket_id == "2400+"
    assert bucket_for_rating(850) is None
    assert bucket_for_rating(None) is None
