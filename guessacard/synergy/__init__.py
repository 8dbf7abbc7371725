"""
Synergy scoring and graph construction.

Two engines (pairwise rules, grouped rules) feed one graph builder.
"""

from guessacard.synergy.aggregate import compute_all_synergies, compute_pairwise_synergies
from guessacard.synergy.graph import (
    apply_filters,
    build_graph,
    build_links,
    build_nodes,
    card_details,
    get_color_by_race,
    graph_stats,
)
from guessacard.synergy.grouped import (
    MEMBERSHIP_RULES,
    WEIGHT_RULES,
    find_all_matches,
    synergies_from_matches,
)
from guessacard.synergy.rules import (
    SYNERGY_RULES,
    TAG_IMPORTANCE,
    raw_synergy,
    rule_breakdown,
    score_synergy,
    value_multiplier,
)

__all__ = [
    "MEMBERSHIP_RULES",
    "SYNERGY_RULES",
    "TAG_IMPORTANCE",
    "WEIGHT_RULES",
    "apply_filters",
    "build_graph",
    "build_links",
    "build_nodes",
    "card_details",
    "compute_all_synergies",
    "compute_pairwise_synergies",
    "find_all_matches",
    "get_color_by_race",
    "graph_stats",
    "raw_synergy",
    "rule_breakdown",
    "score_synergy",
    "synergies_from_matches",
    "value_multiplier",
]
