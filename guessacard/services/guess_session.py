"""
Guess session commands.

Every command takes a SessionState and returns a new one; none of them
mutates its input or keeps state of its own. Callers persist the returned
state (see guessacard.db.operations.save_snapshot).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from guessacard.filtering.closeness import CLOSE_THRESHOLD
from guessacard.filtering.consistency import CandidateView, annotate_candidates
from guessacard.filtering.selectors import available_levels, available_races, card_options
from guessacard.models.card import Card, Race
from guessacard.models.failure import GuessIndexError
from guessacard.models.guess import Feedback, Guess
from guessacard.models.session import SessionState, SortOrder

logger = logging.getLogger(__name__)


def add_guess(state: SessionState, card_id: str, feedback: Feedback) -> SessionState:
    """Append a guess. Unknown card ids are kept; the filter rejects them."""
    return state.with_changes(guesses=(*state.guesses, Guess(card_id, feedback)))


def remove_guess(state: SessionState, index: int) -> SessionState:
    """
    Remove the guess at ``index``; later guesses shift down.

    Raises:
        GuessIndexError: If there is no guess at ``index``
    """
    if index < 0 or index >= len(state.guesses):
        raise GuessIndexError(index, len(state.guesses))
    guesses = state.guesses[:index] + state.guesses[index + 1 :]
    return state.with_changes(guesses=guesses)


def reset_guesses(state: SessionState) -> SessionState:
    return state.with_changes(guesses=())


def replace_cards(
    state: SessionState,
    cards: Sequence[Card],
    fragments: Sequence[str] | None = None,
) -> SessionState:
    """
    Swap in a newly loaded collection.

    Everything derived from the previous collection is invalidated: the
    guess history and the race/level selection are cleared.
    """
    logger.info(
        "session_cards_replaced",
        extra={"cards": len(cards), "cleared_guesses": len(state.guesses)},
    )
    return state.with_changes(
        cards=tuple(cards),
        guesses=(),
        fragments=tuple(fragments) if fragments is not None else state.fragments,
        selected_race=None,
        selected_level=None,
    )


def set_sort_order(state: SessionState, sort_by: SortOrder) -> SessionState:
    return state.with_changes(sort_by=sort_by)


def select_race(state: SessionState, race: Race | None) -> SessionState:
    """Select a race for the card picker. The level selection is kept."""
    return state.with_changes(selected_race=race)


def select_level(state: SessionState, level: int | None) -> SessionState:
    return state.with_changes(selected_level=level)


@dataclass(frozen=True, slots=True)
class HistoryRow:
    """A numbered history row. ``card`` is None if the id is not loaded."""

    position: int
    guess: Guess
    card: Card | None


@dataclass(frozen=True, slots=True)
class PickerView:
    races: list[Race]
    levels: list[int]
    selected_race: Race | None
    selected_level: int | None
    options: list[Card]


@dataclass(frozen=True, slots=True)
class SessionView:
    """Everything the guessing screen renders."""

    candidates: list[CandidateView]
    history: list[HistoryRow]
    picker: PickerView
    remaining: int
    total: int


def history_rows(state: SessionState) -> list[HistoryRow]:
    index = state.card_index()
    return [
        HistoryRow(position=i + 1, guess=guess, card=index.get(guess.card_id))
        for i, guess in enumerate(state.guesses)
    ]


def picker_view(state: SessionState) -> PickerView:
    """
    Race/level picker contents.

    A selection that no longer matches the loaded cards is shown as empty.
    """
    races = available_races(state.cards)
    race = state.selected_race if state.selected_race in races else None
    levels = available_levels(state.cards, race)
    level = state.selected_level if state.selected_level in levels else None
    return PickerView(
        races=races,
        levels=levels,
        selected_race=race,
        selected_level=level,
        options=card_options(state.cards, race, level),
    )


def render_session(state: SessionState, threshold: float = CLOSE_THRESHOLD) -> SessionView:
    """Recompute everything the guessing screen shows from the state."""
    candidates = annotate_candidates(state.cards, state.guesses, state.sort_by, threshold)
    return SessionView(
        candidates=candidates,
        history=history_rows(state),
        picker=picker_view(state),
        remaining=len(candidates),
        total=len(state.cards),
    )
