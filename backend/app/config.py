"""
Chess Tactics Backend - Configuration

Loads settings from environment variables with Pydantic validation.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from puzzles.difficulty import DEFAULT_RANGE

REPO_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ─── Datasets ───
    # Raw dataset folder consumed by the manifest build
    problems_source_dir: Path = REPO_ROOT / "Chess_problems"
    # Copy of the dataset served to the problem endpoint
    problems_dir: Path = REPO_ROOT / "dist" / "_data" / "Chess_problems"

    # ─── Manifest ───
    manifest_path: Path = REPO_ROOT / "dist" / "puzzles" / "manifest.json"
    public_manifest_path: Path = REPO_ROOT / "public" / "puzzles" / "manifest.json"

    # ─── Problem endpoint ───
    default_range: str = DEFAULT_RANGE

    # ─── App ───
    cors_origins: str = "http://localhost:5173"
    env: str = "development"
    log_level: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
