"""
Candidate filtering for the guessing game.

Closeness predicate, consistency filter and card picker helpers.
"""

from guessacard.filtering.closeness import CLOSE_THRESHOLD, is_close
from guessacard.filtering.consistency import (
    CandidateView,
    annotate_candidates,
    candidate_consistent,
    filter_candidates,
    has_close_signal,
    sort_candidates,
)
from guessacard.filtering.selectors import available_levels, available_races, card_options

__all__ = [
    "CLOSE_THRESHOLD",
    "CandidateView",
    "annotate_candidates",
    "available_levels",
    "available_races",
    "candidate_consistent",
    "card_options",
    "filter_candidates",
    "has_close_signal",
    "is_close",
    "sort_candidates",
]
