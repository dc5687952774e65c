"""Service status: the API banner and a readiness check of the built assets."""

from fastapi import APIRouter, Depends

from app.config import Settings, get_settings
from puzzles.difficulty import SUPPORTED_RANGE_KEYS, dataset_filename

router = APIRouter()


@router.get("/")
async def root():
    return {"status": "ok", "service": "chess-tactics-api", "version": "1.0.0"}


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    """Healthy when every range has its dataset; lists what is missing otherwise."""
    missing = [
        key for key in SUPPORTED_RANGE_KEYS
        if not (settings.problems_dir / dataset_filename(key)).is_file()
    ]
    return {
        "status": "healthy" if not missing else "degraded",
        "datasets": len(SUPPORTED_RANGE_KEYS) - len(missing),
        "missingRanges": missing,
        "manifest": settings.manifest_path.is_file(),
    }
