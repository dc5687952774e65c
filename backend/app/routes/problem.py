"""
Problem routes – random puzzle per rating range, and the built manifest.

Every response is marked non-cacheable: each call returns a different puzzle.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.problem_service import ProblemService, ProblemServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE = {"Cache-Control": "no-store"}


# ═══════════════════════════════════════════════════════════
# Schemas
# ═══════════════════════════════════════════════════════════


class ProblemOut(BaseModel):
    id: Optional[str] = None
    fen: str
    moves: list[str]
    rating: Optional[Union[int, float]] = None
    rd: Optional[Union[int, float]] = None
    popularity: Optional[Union[int, float]] = None
    plays: Optional[Union[int, float]] = None
    themes: list[str] = []
    gameUrl: Optional[str] = None
    opening: Optional[str] = None
    range: str
    index: int


class ErrorOut(BaseModel):
    error: str
    message: str


def get_problem_service(settings: Settings = Depends(get_settings)) -> ProblemService:
    return ProblemService(settings.problems_dir, default_range=settings.default_range)


# ═══════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════


@router.get(
    "/problem",
    response_model=ProblemOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
def get_problem(
    range_param: Optional[str] = Query(None, alias="range"),
    min_rating: Optional[str] = Query(None, alias="min"),
    max_rating: Optional[str] = Query(None, alias="max"),
    service: ProblemService = Depends(get_problem_service),
):
    """Pick one random puzzle from the dataset of the requested range."""
    try:
        payload = service.pick(range_param, min_rating, max_rating)
        body = ProblemOut(**payload).model_dump(exclude_none=True)
    except ProblemServiceError as e:
        return JSONResponse(e.to_dict(), status_code=e.status_code, headers=NO_STORE)
    except Exception as e:
        logger.exception("Problem selection failed")
        return JSONResponse(
            {"error": "server_error", "message": str(e)},
            status_code=500,
            headers=NO_STORE,
        )
    return JSONResponse(body, headers=NO_STORE)


@router.get("/manifest", responses={404: {"model": ErrorOut}})
def get_manifest(settings: Settings = Depends(get_settings)):
    """The manifest written by the last build."""
    path = settings.manifest_path
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return JSONResponse(
            {"error": "not_found", "message": "Manifest has not been built"},
            status_code=404,
            headers=NO_STORE,
        )
    return JSONResponse(data, headers=NO_STORE)
