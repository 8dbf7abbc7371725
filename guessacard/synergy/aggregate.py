"""
Per-card synergy aggregation.

Produces, for every card, the list of cards it synergizes with, strongest
first. Scores are recomputed from scratch on every call.
"""

import logging
from collections.abc import Mapping, Sequence

from guessacard.models.card import Card
from guessacard.models.synergy import SynergyEntry, SynergyMap, SynergyMode
from guessacard.models.tags import normalize_tags
from guessacard.synergy.grouped import find_all_matches, synergies_from_matches
from guessacard.synergy.rules import score_synergy

logger = logging.getLogger(__name__)


def compute_pairwise_synergies(
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
) -> SynergyMap:
    """
    Score every ordered pair of distinct cards.

    Only strictly positive scores are kept. Every card gets a list, possibly
    empty. Sorting is stable, so ties keep computation order.
    """
    normalized = {card.id: normalize_tags(tags_by_card.get(card.id)) for card in cards}
    synergies: SynergyMap = {}

    for i, card1 in enumerate(cards):
        entries = synergies.setdefault(card1.id, [])
        for j, card2 in enumerate(cards):
            if i == j or card1.id == card2.id:
                continue
            points = score_synergy(card1, card2, normalized[card1.id], normalized[card2.id])
            if points > 0:
                entries.append(SynergyEntry(card2.id, points))
        entries.sort(key=lambda entry: -entry.points)

    return synergies


def compute_all_synergies(
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
    mode: SynergyMode = SynergyMode.PAIRWISE,
) -> SynergyMap:
    """
    Compute synergy lists for every card using the selected engine.

    Args:
        cards: Loaded cards
        tags_by_card: Tag table (card_id -> tag -> weight)
        mode: PAIRWISE or GROUPED engine

    Returns:
        Mapping of card id to entries sorted by points descending
    """
    if mode == SynergyMode.GROUPED:
        synergies = synergies_from_matches(tags_by_card, find_all_matches(cards, tags_by_card))
    else:
        synergies = compute_pairwise_synergies(cards, tags_by_card)

    logger.info(
        "synergies_computed",
        extra={
            "mode": mode.value,
            "cards": len(cards),
            "entries": sum(len(entries) for entries in synergies.values()),
        },
    )

    return synergies
