import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guessacard.api import graph_router, health_router, sessions_router
from guessacard.config import settings
from guessacard.db.database import dispose_db, init_db
from guessacard.models.failure import KnownError, create_unknown_failure, finalize_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("guessacard"),
    lifespan=lifespan,
)

app.include_router(graph_router)
app.include_router(health_router)
app.include_router(sessions_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Classified failures leave as an ApiResponse envelope, state untouched."""
    logger.info(
        "request_failed",
        extra={"path": request.url.path, "kind": exc.kind.value, "status": exc.status_code},
    )
    response = finalize_response(exc.to_response())
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified leaves as an unknown failure, type name only."""
    logger.exception("request_crashed", extra={"path": request.url.path})
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
