"""
Tag table normalization.

Tag sources mix numeric weights with descriptive entries (e.g. "pack": "核心").
Weights are coerced to floats where tags are read so that no arithmetic ever
sees a non-number. Anything that is not a finite number becomes 0.
"""

import math
from collections.abc import Mapping
from typing import Any

# card_id -> tag name -> weight
TagTable = dict[str, dict[str, float]]


def normalize_weight(value: Any) -> float:
    """Coerce a raw tag weight to a finite float, defaulting to 0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, int | float | str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def normalize_tags(tags: Mapping[str, Any] | None) -> dict[str, float]:
    """Normalize one card's tags. A missing mapping becomes empty."""
    if not tags:
        return {}
    return {str(name): normalize_weight(weight) for name, weight in tags.items()}


def normalize_tag_table(raw: Mapping[str, Any] | None) -> TagTable:
    """Normalize a whole ``cardTags`` table, skipping non-mapping entries."""
    if not raw:
        return {}
    table: TagTable = {}
    for card_id, tags in raw.items():
        if isinstance(tags, Mapping):
            table[str(card_id)] = normalize_tags(tags)
    return table


def all_tag_names(table: Mapping[str, Mapping[str, float]]) -> list[str]:
    """Sorted list of every tag name used anywhere in the table."""
    names: set[str] = set()
    for tags in table.values():
        names.update(tags)
    return sorted(names)
