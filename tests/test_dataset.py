import pytest

from puzzles.dataset import parse_dataset, read_dataset, split_tokens, to_number

from tests.conftest import START_FEN, csv_text


def test_parse_rows_keyed_by_header():
    rows = parse_dataset(csv_text(
        f"p1,{START_FEN},e2e4 e7e5,1500,80,90,10,fork pin,https://lichess.org/x,Sicilian,",
    ))
    assert len(rows) == 1
    row = rows[0]
    assert row["PuzzleId"] == "p1"
    assert row["FEN"] == START_FEN
    assert row["Moves"] == "e2e4 e7e5"
    assert row["OpeningTags"] == "Sicilian"
    assert row["ID"] == ""


def test_rows_without_fen_or_moves_are_excluded():
    rows = parse_dataset(csv_text(
        f"p1,{START_FEN},,1500,,,,,,,",
        "p2,,e2e4,1500,,,,,,,",
        f"p3,{START_FEN},e2e4,1500,,,,,,,",
    ))
    assert [r["PuzzleId"] for r in rows] == ["p3"]


def test_quoted_fields_keep_embedded_commas():
    rows = parse_dataset(csv_text(
        f'p1,{START_FEN},e2e4,1500,,,,"mate, short",,"Italian, Two Knights",',
    ))
    assert rows[0]["Themes"] == "mate, short"
    assert rows[0]["OpeningTags"] == "Italian, Two Knights"


def test_blank_lines_and_crlf():
    text = csv_text("", f"p1,{START_FEN},e2e4,1500,,,,,,,", "").replace("\n", "\r\n")
    assert [r["PuzzleId"] for r in parse_dataset(text)] == ["p1"]


def test_empty_or_headerless_input():
    assert parse_dataset("") == []
    assert parse_dataset("   \n") == []
    assert parse_dataset(csv_text()) == []
    assert parse_dataset("PuzzleId,Rating\np1,1500\n") == []


def test_read_dataset(tmp_path):
    path = tmp_path / "problem_900to1200.csv"
    path.write_text(csv_text(f"p1,{START_FEN},e2e4,1000,,,,,,,"), encoding="utf-8")
    assert len(read_dataset(path)) == 1

    with pytest.raises(OSError):
        read_dataset(tmp_path / "missing.csv")


def test_to_number():
    assert to_number("1500") == 1500
    assert isinstance(to_number("1500"), int)
    assert to_number(" 12.5 ") == 12.5
    assert to_number("1e3") == 1000
    assert to_number("") is None
    assert to_number(None) is None
    assert to_number("abc") is None
    assert to_number("nan") is None
    assert to_number("inf") is None


def test_split_tokens():
    assert split_tokens("e2e4  e7e5\tg1f3 ") == ["e2e4", "e7e5", "g1f3"]
    assert split_tokens("") == []
    assert split_tokens(None) == []
