"""
Card model and record normalization.

Raw dataset records are free-form (race spelled in any case, numbers as
strings). Everything is normalized here, once, at load time. A record that
cannot be normalized is dropped rather than repaired.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

MIN_LEVEL = 0
MAX_LEVEL = 6


class Race(str, Enum):
    """The four playable races."""

    PROTESS = "Protess"
    ZERG = "Zerg"
    TERRAN = "Terran"
    NEUTRAL = "Neutral"


_RACE_ALIASES: dict[str, Race] = {
    "protess": Race.PROTESS,
    "protoss": Race.PROTESS,
    "zerg": Race.ZERG,
    "terran": Race.TERRAN,
    "neutral": Race.NEUTRAL,
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    A single card from a loaded dataset.

    Attributes:
        id: Unique identifier within the loaded dataset
        race: One of the four races
        level: Tavern level, clamped into [0, 6]
        number: Unit count printed on the card
        value: Card value, used for closeness and node size
        is_core_set: True when the card came from the core fragment
    """

    id: str
    race: Race
    level: int
    number: float
    value: float
    is_core_set: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "race": self.race.value,
            "level": self.level,
            "number": self.number,
            "value": self.value,
            "is_core_set": self.is_core_set,
        }


def normalize_race(text: Any) -> Race | None:
    """
    Map free-form race text onto a Race.

    Case-insensitive, ignores surrounding whitespace, and accepts the
    "protoss" spelling. Returns None for anything unrecognized.
    """
    if text is None:
        return None
    if isinstance(text, Race):
        return text
    return _RACE_ALIASES.get(str(text).strip().lower())


def _to_finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_level(value: Any) -> int | None:
    """
    Floor a level and clamp it into [MIN_LEVEL, MAX_LEVEL].

    Returns None when the value is not a finite number.
    """
    number = _to_finite(value)
    if number is None:
        return None
    return max(MIN_LEVEL, min(MAX_LEVEL, math.floor(number)))


def card_from_record(record: Mapping[str, Any], *, is_core_set: bool = False) -> Card | None:
    """
    Build a Card from a raw dataset record.

    Returns None for malformed records: unknown race, or a level, number or
    value that is not a finite number. The id falls back to "race-number".
    """
    race = normalize_race(record.get("race"))
    level = normalize_level(record.get("level"))
    number = _to_finite(record.get("number"))
    value = _to_finite(record.get("value"))
    if race is None or level is None or number is None or value is None:
        return None

    raw_id = record.get("id")
    card_id = str(raw_id).strip() if raw_id is not None else ""
    if not card_id:
        card_id = f"{race.value}-{number:g}"

    return Card(
        id=card_id,
        race=race,
        level=level,
        number=number,
        value=value,
        is_core_set=bool(is_core_set),
    )


def card_from_dict(data: Mapping[str, Any]) -> Card | None:
    """Rebuild a Card from its ``to_dict`` form (snapshot restore)."""
    return card_from_record(data, is_core_set=bool(data.get("is_core_set", False)))


def index_cards(cards: Iterable[Card]) -> dict[str, Card]:
    """Index cards by id. Later cards win on duplicate ids."""
    return {card.id: card for card in cards}
