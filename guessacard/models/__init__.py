from guessacard.models.card import (
    MAX_LEVEL,
    MIN_LEVEL,
    Card,
    Race,
    card_from_record,
    index_cards,
    normalize_level,
    normalize_race,
)
from guessacard.models.failure import (
    ApiResponse,
    DatasetLoadError,
    FailureDetail,
    FailureKind,
    GuessIndexError,
    KnownError,
    OutcomeType,
    StaleLoadError,
    UnsupportedFormatError,
    create_unknown_failure,
    finalize_response,
)
from guessacard.models.guess import Feedback, Guess
from guessacard.models.session import MergeResult, SessionState, SortOrder
from guessacard.models.synergy import (
    GraphData,
    GraphLink,
    GraphNode,
    SynergyEntry,
    SynergyMap,
    SynergyMode,
)
from guessacard.models.tags import TagTable, normalize_tag_table, normalize_tags, normalize_weight

__all__ = [
    "ApiResponse",
    "Card",
    "DatasetLoadError",
    "FailureDetail",
    "FailureKind",
    "Feedback",
    "GraphData",
    "GraphLink",
    "GraphNode",
    "Guess",
    "GuessIndexError",
    "KnownError",
    "MAX_LEVEL",
    "MIN_LEVEL",
    "MergeResult",
    "OutcomeType",
    "Race",
    "SessionState",
    "SortOrder",
    "StaleLoadError",
    "SynergyEntry",
    "SynergyMap",
    "SynergyMode",
    "TagTable",
    "UnsupportedFormatError",
    "card_from_record",
    "create_unknown_failure",
    "finalize_response",
    "index_cards",
    "normalize_level",
    "normalize_race",
    "normalize_tag_table",
    "normalize_tags",
    "normalize_weight",
]
