from guessacard.db.database import dispose_db, get_session, init_db
from guessacard.db.operations import (
    delete_snapshot,
    get_snapshot,
    load_state,
    save_snapshot,
)

__all__ = [
    "delete_snapshot",
    "dispose_db",
    "get_session",
    "get_snapshot",
    "init_db",
    "load_state",
    "save_snapshot",
]
