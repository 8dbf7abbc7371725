"""
Consistency filter.

Given the cards and a guess history, compute which core-set cards could still
be the hidden card.

INVARIANTS:
- A candidate survives iff it agrees with every guess (a conjunction), so the
  result does not depend on guess order
- Re-running the filter on its own inputs gives the same result
- A guess naming a card that is not loaded rejects every candidate
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from guessacard.filtering.closeness import CLOSE_THRESHOLD, is_close
from guessacard.models.card import Card, index_cards
from guessacard.models.guess import Feedback, Guess
from guessacard.models.session import SortOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CandidateView:
    """A candidate plus whether any guessed card is close to it."""

    card: Card
    close_signal: bool


def candidate_consistent(
    candidate: Card,
    guesses: Iterable[Guess],
    index: Mapping[str, Card],
    threshold: float = CLOSE_THRESHOLD,
) -> bool:
    """
    Check one candidate against every guess.

    Stops at the first guess the candidate contradicts.
    """
    for guess in guesses:
        picked = index.get(guess.card_id)
        if picked is None:
            return False
        close = is_close(picked, candidate, threshold)
        if guess.feedback == Feedback.CLOSE and not close:
            return False
        if guess.feedback == Feedback.NOT_CLOSE and close:
            return False
    return True


def filter_candidates(
    cards: Sequence[Card],
    guesses: Sequence[Guess],
    threshold: float = CLOSE_THRESHOLD,
) -> list[Card]:
    """
    Return the core-set cards consistent with every guess.

    Args:
        cards: The full loaded collection (guesses resolve against all of it)
        guesses: The guess history, in any order
        threshold: Value distance counted as close

    Returns:
        Candidates in collection order
    """
    index = index_cards(cards)
    candidates = [
        card
        for card in cards
        if card.is_core_set and candidate_consistent(card, guesses, index, threshold)
    ]

    logger.debug(
        "candidates_filtered",
        extra={
            "total": len(cards),
            "guesses": len(guesses),
            "remaining": len(candidates),
        },
    )

    return candidates


def has_close_signal(
    candidate: Card,
    guesses: Iterable[Guess],
    index: Mapping[str, Card],
    threshold: float = CLOSE_THRESHOLD,
) -> bool:
    """True when any resolvable guessed card is close to the candidate."""
    for guess in guesses:
        picked = index.get(guess.card_id)
        if picked is not None and is_close(picked, candidate, threshold):
            return True
    return False


def _sort_key(sort_by: SortOrder):
    if sort_by == SortOrder.NUMBER:
        return lambda c: (c.number, c.race.value, c.value)
    if sort_by == SortOrder.VALUE:
        return lambda c: (c.value, c.race.value, c.number)
    return lambda c: (c.race.value, c.number, c.value)


def sort_candidates(cards: Iterable[Card], sort_by: SortOrder = SortOrder.RACE) -> list[Card]:
    """
    Order candidates for display.

    race: race, then number, then value
    number: number, then race, then value
    value: value, then race, then number
    """
    return sorted(cards, key=_sort_key(sort_by))


def annotate_candidates(
    cards: Sequence[Card],
    guesses: Sequence[Guess],
    sort_by: SortOrder = SortOrder.RACE,
    threshold: float = CLOSE_THRESHOLD,
) -> list[CandidateView]:
    """Filter, sort and mark close signals in one pass for rendering."""
    index = index_cards(cards)
    candidates = sort_candidates(filter_candidates(cards, guesses, threshold), sort_by)
    return [
        CandidateView(card=card, close_signal=has_close_signal(card, guesses, index, threshold))
        for card in candidates
    ]
