"""
Health check endpoints.

/health is a liveness check. /ready checks the snapshot store and, for a
local data directory, that the core dataset file is present.
"""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from guessacard.api.dependencies import get_dataset_loader
from guessacard.config import BUILTIN_FRAGMENTS, CORE_FRAGMENT
from guessacard.db.database import get_session
from guessacard.services.dataset_loader import DatasetLoader

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    dataset: str | None = None


def _dataset_status(loader: DatasetLoader) -> str:
    # Remote sources are only checked when a load actually happens
    if loader.is_remote:
        return "remote"
    core_file = Path(loader.source) / BUILTIN_FRAGMENTS[CORE_FRAGMENT]
    return "available" if core_file.is_file() else "missing"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    loader: Annotated[DatasetLoader, Depends(get_dataset_loader)],
) -> HealthResponse:
    """
    Readiness check.

    Returns 503 when snapshots cannot be read or the core dataset is missing.
    """
    dataset = _dataset_status(loader)
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        database = "disconnected"

    if database == "disconnected" or dataset == "missing":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database=database, dataset=dataset)
    return HealthResponse(status="ready", database=database, dataset=dataset)
