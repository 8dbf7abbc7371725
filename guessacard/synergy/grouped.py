"""
Grouped synergy engine.

Instead of scoring every pair with every rule, each membership rule first
collects the cards it applies to, then the weight rule of the same name
scores every pair inside that group. A pair matched by two rules gets two
separate contributions.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from itertools import combinations

from guessacard.models.card import Card, Race
from guessacard.models.synergy import SynergyEntry, SynergyMap
from guessacard.models.tags import normalize_tags

logger = logging.getLogger(__name__)

Tags = Mapping[str, float]

TASK_CHAIN = "人族任务流"
TASK_CHAIN_CORE = "人族任务流核心"
BIOTECH = "人族生化"
MECHANIZATION = "人族机械化"
CARD_CYCLING = "刷牌"


@dataclass(frozen=True, slots=True)
class MembershipRule:
    """Decides whether a card belongs to a rule's group."""

    name: str
    description: str
    matches: Callable[[Card, Tags], bool]


@dataclass(frozen=True, slots=True)
class WeightRule:
    """Scores a pair of cards inside a rule's group."""

    name: str
    description: str
    evaluate: Callable[[Card, Card, Tags, Tags], float]


def _race_member(race: Race) -> Callable[[Card, Tags], bool]:
    return lambda card, tags: card.race == race  # noqa: ARG005


def _tag_member(*names: str) -> Callable[[Card, Tags], bool]:
    return lambda card, tags: any(tags.get(name) for name in names)  # noqa: ARG005


def _race_weight(race: Race) -> Callable[[Card, Card, Tags, Tags], float]:
    def evaluate(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:
        if card1.race != race or card2.race != race:
            return 0.0
        return tags1.get(race.value, 0.0) + tags2.get(race.value, 0.0)

    return evaluate


def _tag_sum(name: str) -> Callable[[Card, Card, Tags, Tags], float]:
    def evaluate(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:  # noqa: ARG001
        return tags1.get(name, 0.0) + tags2.get(name, 0.0)

    return evaluate


def _task_chain(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:  # noqa: ARG001
    def value(tags: Tags) -> float:
        return tags.get(TASK_CHAIN, 0.0) + tags.get(TASK_CHAIN_CORE, 0.0) * 2

    return value(tags1) + value(tags2)


MEMBERSHIP_RULES: tuple[MembershipRule, ...] = (
    MembershipRule("Terran_race", "All Terran cards", _race_member(Race.TERRAN)),
    MembershipRule(
        "任务流", "Cards on the Terran task chain", _tag_member(TASK_CHAIN, TASK_CHAIN_CORE)
    ),
    MembershipRule("人族生化", "Terran biotech cards", _tag_member(BIOTECH)),
    MembershipRule("人族机械化", "Terran mechanization cards", _tag_member(MECHANIZATION)),
    MembershipRule("Zerg_race", "All Zerg cards", _race_member(Race.ZERG)),
    MembershipRule("Neutral_race", "All Neutral cards", _race_member(Race.NEUTRAL)),
    MembershipRule("Protess_race", "All Protess cards", _race_member(Race.PROTESS)),
    MembershipRule("刷牌", "Card cycling cards", _tag_member(CARD_CYCLING)),
)

WEIGHT_RULES: tuple[WeightRule, ...] = (
    WeightRule("Terran_race", "Sum of Terran race tag weights", _race_weight(Race.TERRAN)),
    WeightRule("任务流", "Task chain value plus core value x2", _task_chain),
    WeightRule("人族生化", "Sum of biotech tag weights", _tag_sum(BIOTECH)),
    WeightRule("人族机械化", "Sum of mechanization tag weights", _tag_sum(MECHANIZATION)),
    WeightRule("Zerg_race", "Sum of Zerg race tag weights", _race_weight(Race.ZERG)),
    WeightRule("Neutral_race", "Sum of Neutral race tag weights", _race_weight(Race.NEUTRAL)),
    WeightRule("Protess_race", "Sum of Protess race tag weights", _race_weight(Race.PROTESS)),
    WeightRule("刷牌", "Sum of card cycling tag weights", _tag_sum(CARD_CYCLING)),
)


def find_all_matches(
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
    rules: Sequence[MembershipRule] = MEMBERSHIP_RULES,
) -> dict[str, list[Card]]:
    """Group cards by every membership rule. Empty groups are omitted."""
    matches: dict[str, list[Card]] = {}
    for rule in rules:
        members = [
            card for card in cards if rule.matches(card, normalize_tags(tags_by_card.get(card.id)))
        ]
        if members:
            matches[rule.name] = members
    return matches


def synergies_from_matches(
    tags_by_card: Mapping[str, Mapping[str, float]],
    matches: Mapping[str, Sequence[Card]],
    weight_rules: Sequence[WeightRule] = WEIGHT_RULES,
) -> SynergyMap:
    """
    Score every within-group pair with its group's weight rule.

    Positive scores are recorded in both directions with the same value.
    Lists are sorted by points descending.
    """
    by_name = {rule.name: rule for rule in weight_rules}
    synergies: SynergyMap = {}

    for rule_name, members in matches.items():
        weight_rule = by_name.get(rule_name)
        if weight_rule is None:
            logger.warning("weight_rule_missing", extra={"rule": rule_name})
            continue

        for card1, card2 in combinations(members, 2):
            if card1.id == card2.id:
                continue
            tags1 = normalize_tags(tags_by_card.get(card1.id))
            tags2 = normalize_tags(tags_by_card.get(card2.id))
            points = weight_rule.evaluate(card1, card2, tags1, tags2)
            if points <= 0:
                continue
            synergies.setdefault(card1.id, []).append(SynergyEntry(card2.id, points, rule_name))
            synergies.setdefault(card2.id, []).append(SynergyEntry(card1.id, points, rule_name))

    for entries in synergies.values():
        entries.sort(key=lambda entry: -entry.points)

    return synergies
