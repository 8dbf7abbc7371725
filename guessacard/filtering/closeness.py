"""
Closeness predicate.

Two cards are "close" when they share a race, share a unit number, or their
values differ by at most CLOSE_THRESHOLD. This is the only comparison used to
interpret guess feedback.
"""

from guessacard.models.card import Card

CLOSE_THRESHOLD = 200


def is_close(a: Card, b: Card, threshold: float = CLOSE_THRESHOLD) -> bool:
    """Symmetric closeness test between two cards."""
    return a.race == b.race or a.number == b.number or abs(a.value - b.value) <= threshold
