"""
Card picker helpers.

The guess form narrows the card list by race, then level. These functions
compute the options for each step from the loaded collection.
"""

from collections.abc import Sequence

from guessacard.models.card import Card, Race


def available_races(cards: Sequence[Card]) -> list[Race]:
    """Races present in the collection, alphabetically."""
    return sorted({card.race for card in cards}, key=lambda race: race.value)


def available_levels(cards: Sequence[Card], race: Race | None = None) -> list[int]:
    """Levels present in the collection, optionally within one race."""
    return sorted({card.level for card in cards if race is None or card.race == race})


def card_options(
    cards: Sequence[Card],
    race: Race | None = None,
    level: int | None = None,
) -> list[Card]:
    """
    Cards matching the race/level selection, in picker order.

    Picker order is race, level, number, value.
    """
    options = [
        card
        for card in cards
        if (race is None or card.race == race) and (level is None or card.level == level)
    ]
    options.sort(key=lambda c: (c.race.value, c.level, c.number, c.value))
    return options
