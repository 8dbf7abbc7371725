"""
Explicit session state.

A SessionState is an immutable value: every command returns a new state.
The presentation layer owns it (load from snapshot, apply command, save);
the core never keeps a reference to it between calls.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from guessacard.models.card import Card, Race, card_from_dict, normalize_race
from guessacard.models.guess import Guess

logger = logging.getLogger(__name__)


class SortOrder(str, Enum):
    """Candidate table ordering."""

    RACE = "race"
    NUMBER = "number"
    VALUE = "value"


def _as_list(value: Any) -> list[Any]:
    # Snapshot collections are JSON arrays; anything else reads as empty
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class SessionState:
    """Everything one player's deduction session depends on."""

    cards: tuple[Card, ...] = ()
    guesses: tuple[Guess, ...] = ()
    sort_by: SortOrder = SortOrder.RACE
    fragments: tuple[str, ...] = ("core",)
    selected_race: Race | None = None
    selected_level: int | None = None

    def card_index(self) -> dict[str, Card]:
        return {card.id: card for card in self.cards}

    def with_changes(self, **changes: Any) -> "SessionState":
        return replace(self, **changes)

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to the persisted snapshot blob."""
        return {
            "cards": [card.to_dict() for card in self.cards],
            "guesses": [guess.to_dict() for guess in self.guesses],
            "sort_by": self.sort_by.value,
            "fragments": list(self.fragments),
            "selected_race": self.selected_race.value if self.selected_race else None,
            "selected_level": self.selected_level,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any] | None) -> "SessionState":
        """
        Restore a session from a snapshot blob.

        Unreadable entries are skipped so that a damaged snapshot degrades
        to a fresh session instead of failing the request.
        """
        if not data or not isinstance(data, Mapping):
            return cls()

        cards: list[Card] = []
        for raw in _as_list(data.get("cards")):
            card = card_from_dict(raw) if isinstance(raw, Mapping) else None
            if card is None:
                logger.warning("snapshot_card_skipped", extra={"raw": raw})
                continue
            cards.append(card)

        guesses: list[Guess] = []
        for raw in _as_list(data.get("guesses")):
            try:
                guesses.append(Guess.from_dict(raw))
            except (KeyError, TypeError, ValueError):
                logger.warning("snapshot_guess_skipped", extra={"raw": raw})

        try:
            sort_by = SortOrder(data.get("sort_by") or SortOrder.RACE.value)
        except (TypeError, ValueError):
            sort_by = SortOrder.RACE

        raw_fragments = _as_list(data.get("fragments"))
        fragments = tuple(str(f) for f in raw_fragments) if raw_fragments else ("core",)
        selected_level = data.get("selected_level")

        return cls(
            cards=tuple(cards),
            guesses=tuple(guesses),
            sort_by=sort_by,
            fragments=fragments,
            selected_race=normalize_race(data.get("selected_race")),
            selected_level=selected_level if isinstance(selected_level, int) else None,
        )


@dataclass
class MergeResult:
    """Outcome of merging dataset fragments into one card collection."""

    cards: list[Card] = field(default_factory=list)
    dropped: int = 0
    pack_names: list[str] = field(default_factory=list)

    def get_user_message(self) -> str:
        packs = ", ".join(self.pack_names)
        message = f"Loaded {len(self.cards)} cards from {packs}" if packs else (
            f"Loaded {len(self.cards)} cards"
        )
        if self.dropped:
            message += f" ({self.dropped} invalid dropped)"
        return message
