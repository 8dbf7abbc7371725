"""
Pairwise synergy rules.

Every rule is a pure function of (card1, card2, tags1, tags2) returning
points. A pair's raw synergy is the sum over SYNERGY_RULES; the weighted
score multiplies that by the value multiplier of the tags both cards share.

Tag names are the dataset's own (Chinese) tag names:
    英雄 hero, 单位 unit, 飞行 flyer, 法术 spell, 近战 melee,
    远程 ranged, 建筑 building
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from guessacard.models.card import Card
from guessacard.models.tags import normalize_tags

Tags = Mapping[str, float]
RuleFn = Callable[[Card, Card, Tags, Tags], float]

HERO = "英雄"
UNIT = "单位"
FLYER = "飞行"
SPELL = "法术"
MELEE = "近战"
RANGED = "远程"
BUILDING = "建筑"

SAME_RACE_FACTOR = 2.0
SHARED_TAG_FACTOR = 1.5
MULTIPLIER_STEP = 0.1

# Higher importance = shared tag boosts the pair more
TAG_IMPORTANCE: dict[str, float] = {
    HERO: 2.0,
    FLYER: 1.8,
    SPELL: 1.6,
    MELEE: 1.4,
    UNIT: 1.2,
    RANGED: 1.5,
    BUILDING: 1.3,
    "Protess": 1.1,
    "Zerg": 1.1,
    "Terran": 1.1,
    "Neutral": 0.9,
}
DEFAULT_IMPORTANCE = 1.0


@dataclass(frozen=True, slots=True)
class SynergyRule:
    """A named pairwise rule."""

    name: str
    description: str
    evaluate: RuleFn


@dataclass(frozen=True, slots=True)
class TagCombo:
    """Two roles that reward each other when split across a pair."""

    name: str
    first: str
    second: str
    factor: float


TAG_COMBOS: tuple[TagCombo, ...] = (
    TagCombo("hero_unit", HERO, UNIT, 1.3),
    TagCombo("flyer_flyer", FLYER, FLYER, 2.0),
    TagCombo("spell_melee", SPELL, MELEE, 1.2),
    TagCombo("building_unit", BUILDING, UNIT, 0.8),
)


def same_race(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:
    if card1.race != card2.race:
        return 0.0
    race_tag = card1.race.value
    return (tags1.get(race_tag, 0.0) + tags2.get(race_tag, 0.0)) * SAME_RACE_FACTOR


def shared_tag(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:
    races = {card1.race.value, card2.race.value}
    return sum(
        (weight + tags2[tag]) * SHARED_TAG_FACTOR
        for tag, weight in tags1.items()
        if tag in tags2 and tag not in races
    )


def _combo_points(combo: TagCombo, tags1: Tags, tags2: Tags) -> float:
    forward = tags1.get(combo.first) and tags2.get(combo.second)
    backward = tags2.get(combo.first) and tags1.get(combo.second)
    if not (forward or backward):
        return 0.0
    if combo.first == combo.second:
        return (tags1[combo.first] + tags2[combo.first]) * combo.factor
    first = tags1.get(combo.first, 0.0) + tags2.get(combo.first, 0.0)
    second = tags1.get(combo.second, 0.0) + tags2.get(combo.second, 0.0)
    return (first + second) * combo.factor


def tag_combos(card1: Card, card2: Card, tags1: Tags, tags2: Tags) -> float:  # noqa: ARG001
    return sum(_combo_points(combo, tags1, tags2) for combo in TAG_COMBOS)


SYNERGY_RULES: tuple[SynergyRule, ...] = (
    SynergyRule("same_race", "Both cards share a race: race tag weights x2", same_race),
    SynergyRule("shared_tag", "Tags held by both cards: combined weight x1.5", shared_tag),
    SynergyRule("tag_combos", "Complementary tag pairs with fixed multipliers", tag_combos),
)


def value_multiplier(tags1: Tags, tags2: Tags) -> float:
    """
    1.0 plus 0.1 x importance for every tag weighted on both cards.
    """
    multiplier = 1.0
    for tag, weight in tags1.items():
        if weight and tags2.get(tag):
            multiplier += TAG_IMPORTANCE.get(tag, DEFAULT_IMPORTANCE) * MULTIPLIER_STEP
    return multiplier


def rule_breakdown(
    card1: Card,
    card2: Card,
    tags1: Mapping[str, Any] | None,
    tags2: Mapping[str, Any] | None,
    rules: tuple[SynergyRule, ...] = SYNERGY_RULES,
) -> dict[str, float]:
    """Points contributed by each rule, before the multiplier."""
    n_tags1 = normalize_tags(tags1)
    n_tags2 = normalize_tags(tags2)
    return {rule.name: rule.evaluate(card1, card2, n_tags1, n_tags2) for rule in rules}


def raw_synergy(
    card1: Card,
    card2: Card,
    tags1: Mapping[str, Any] | None,
    tags2: Mapping[str, Any] | None,
    rules: tuple[SynergyRule, ...] = SYNERGY_RULES,
) -> float:
    """Sum of every rule's points, before the multiplier."""
    return sum(rule_breakdown(card1, card2, tags1, tags2, rules).values())


def score_synergy(
    card1: Card,
    card2: Card,
    tags1: Mapping[str, Any] | None,
    tags2: Mapping[str, Any] | None,
    rules: tuple[SynergyRule, ...] = SYNERGY_RULES,
) -> float:
    """
    Weighted synergy between two cards.

    Tags are normalized here so non-numeric weights count as 0.
    Individual rules are not clamped, so a negative weight in the tag
    table can produce a negative score.
    """
    n_tags1 = normalize_tags(tags1)
    n_tags2 = normalize_tags(tags2)
    raw = sum(rule.evaluate(card1, card2, n_tags1, n_tags2) for rule in rules)
    return raw * value_multiplier(n_tags1, n_tags2)
