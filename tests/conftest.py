# Shared fixtures: small CSV problem datasets and a FastAPI test client
# wired to them.

import random
from pathlib import Path

import chess
import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.main import create_app
from app.problem_service import ProblemService
from app.routes.problem import get_problem_service

HEADER = "PuzzleId,FEN,Moves,Rating,RatingDeviation,Popularity,NbPlays,Themes,GameUrl,OpeningTags,ID"

START_FEN = chess.STARTING_FEN


def csv_text(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


@pytest.fixture()
def problems_dir(tmp_path: Path) -> Path:
    d = tmp_path / "Chess_problems"
    d.mkdir()
    (d / "problem_900to1200.csv").write_text(
        csv_text(
            f"aaa01,{START_FEN},e2e4 e7e5 g1f3,1010,75,95,1200,opening short,https://lichess.org/abc#1,Kings_Pawn,",
            f"aaa02,{START_FEN},d2d4 d7d5,abc,,90,300,endgame,,,",
            f"aaa03,{START_FEN},,1100,80,90,100,short,,,",
        ),
        encoding="utf-8",
    )
    # Header only: parses to zero usable rows
    (d / "problem_1200to1500.csv").write_text(csv_text(), encoding="utf-8")
    (d / "problem_1500to1800.csv").write_text(
        csv_text(f"bbb01,{START_FEN},c2c4 e7e5,1650,70,88,5000,\"english, opening\",,English_Opening,"),
        encoding="utf-8",
    )
    return d


@pytest.fixture()
def client(problems_dir: Path, tmp_path: Path):
    app = create_app()
    settings = Settings(
        problems_dir=problems_dir,
        manifest_path=tmp_path / "dist" / "puzzles" / "manifest.json",
    )
    app.dependency_overrides[get_settings] = lambda: settings
    service = ProblemService(problems_dir, rng=random.Random(7))
    app.dependency_overrides[get_problem_service] = lambda: service
    return TestClient(app)
