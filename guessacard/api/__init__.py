from guessacard.api.graph import router as graph_router
from guessacard.api.health import router as health_router
from guessacard.api.sessions import router as sessions_router

__all__ = [
    "graph_router",
    "health_router",
    "sessions_router",
]
