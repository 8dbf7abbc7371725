"""
Graph builder.

Turns per-card synergy lists into graph data for a force-directed layout:
one node per card, one link per unordered card pair.

INVARIANTS:
- Never two links for the same unordered pair
- Filtering never leaves a link with a missing endpoint
- The graph is rebuilt from scratch, never patched
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from guessacard.models.card import Card, Race
from guessacard.models.synergy import GraphData, GraphLink, GraphNode, SynergyEntry, SynergyMap
from guessacard.models.tags import normalize_tags

logger = logging.getLogger(__name__)

MAX_LINKS_PER_CARD = 20
VISIBILITY_THRESHOLD = 50.0
LINK_WIDTH = 2.0

# Higher synergy = shorter distance
MIN_DISTANCE = 10.0
MAX_DISTANCE = 100.0

MIN_NODE_SIZE = 10.0
MAX_NODE_SIZE = 50.0

DEFAULT_COLOR = "#CCCCCC"
RACE_COLORS: dict[Race, str] = {
    Race.PROTESS: "#0099FF",
    Race.ZERG: "#FF0099",
    Race.TERRAN: "#FF9900",
    Race.NEUTRAL: "#CCCCCC",
}


def get_color_by_race(race: Race | str | None) -> str:
    """Hex color for a race, grey for anything unknown."""
    try:
        return RACE_COLORS.get(Race(race), DEFAULT_COLOR)
    except ValueError:
        return DEFAULT_COLOR


def node_size(value: float) -> float:
    """Node size scales with card value, clamped into [10, 50]."""
    return max(MIN_NODE_SIZE, min(MAX_NODE_SIZE, value / 100))


def build_nodes(
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
) -> list[GraphNode]:
    """One node per card id. Later cards replace earlier ones with the same id."""
    nodes: dict[str, GraphNode] = {}
    for card in cards:
        nodes[card.id] = GraphNode(
            id=card.id,
            label=card.id,
            val=node_size(card.value),
            color=get_color_by_race(card.race),
            race=card.race.value,
            level=card.level,
            value=card.value,
            tags=normalize_tags(tags_by_card.get(card.id)),
        )
    return list(nodes.values())


def build_links(
    synergies: SynergyMap,
    max_links_per_card: int = MAX_LINKS_PER_CARD,
    visibility_threshold: float = VISIBILITY_THRESHOLD,
) -> list[GraphLink]:
    """
    Build deduplicated links from each card's top synergies.

    Each direction of a pair contributes half its points, so a symmetric
    pair seen from both sides totals its one-way score.
    """
    # sorted pair -> (source, target) as first seen
    endpoints: dict[tuple[str, str], tuple[str, str]] = {}
    totals: dict[tuple[str, str], float] = {}

    for card_id, entries in synergies.items():
        for entry in entries[:max_links_per_card]:
            if entry.target_id == card_id:
                continue
            a, b = sorted((card_id, entry.target_id))
            key = (a, b)
            endpoints.setdefault(key, (card_id, entry.target_id))
            totals[key] = totals.get(key, 0.0) + entry.points / 2

    max_points = max(totals.values(), default=0.0)

    links: list[GraphLink] = []
    for key, total in totals.items():
        source, target = endpoints[key]
        ratio = total / max_points if max_points > 0 else 0.0
        links.append(
            GraphLink(
                source=source,
                target=target,
                points=total,
                distance=MAX_DISTANCE - ratio * (MAX_DISTANCE - MIN_DISTANCE),
                width=LINK_WIDTH,
                visible=total >= visibility_threshold,
            )
        )

    return links


def build_graph(
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
    synergies: SynergyMap,
    max_links_per_card: int = MAX_LINKS_PER_CARD,
    visibility_threshold: float = VISIBILITY_THRESHOLD,
) -> GraphData:
    """
    Build graph nodes and links.

    Args:
        cards: Loaded cards
        tags_by_card: Tag table used for node tags
        synergies: Output of compute_all_synergies
        max_links_per_card: Top-K synergies per card turned into links
        visibility_threshold: Links below this total are flagged invisible

    Returns:
        GraphData with all links, visible or not
    """
    graph = GraphData(
        nodes=build_nodes(cards, tags_by_card),
        links=build_links(synergies, max_links_per_card, visibility_threshold),
    )

    logger.info(
        "graph_built",
        extra={
            "nodes": len(graph.nodes),
            "links": len(graph.links),
            "visible_links": sum(1 for link in graph.links if link.visible),
        },
    )

    return graph


def filter_nodes_by_race(nodes: list[GraphNode], race: Race | str | None) -> list[GraphNode]:
    if not race:
        return nodes
    race_name = race.value if isinstance(race, Race) else race
    return [node for node in nodes if node.race == race_name]


def filter_nodes_by_tag(nodes: list[GraphNode], tag: str | None) -> list[GraphNode]:
    if not tag:
        return nodes
    return [node for node in nodes if node.tags.get(tag)]


def filter_links(links: list[GraphLink], visible_nodes: list[GraphNode]) -> list[GraphLink]:
    """Keep only links whose endpoints both survived node filtering."""
    node_ids = {node.id for node in visible_nodes}
    return [link for link in links if link.source in node_ids and link.target in node_ids]


def apply_filters(
    graph: GraphData,
    race: Race | str | None = None,
    tag: str | None = None,
    visible_only: bool = False,
) -> GraphData:
    """
    Filter a built graph without mutating it.

    Nodes are filtered first (race, then tag); links follow their nodes.
    With visible_only, links below the visibility threshold are dropped too.
    """
    nodes = filter_nodes_by_tag(filter_nodes_by_race(graph.nodes, race), tag)
    links = filter_links(graph.links, nodes)
    if visible_only:
        links = [link for link in links if link.visible]
    return GraphData(nodes=nodes, links=links)


@dataclass(frozen=True, slots=True)
class GraphStats:
    total_cards: int
    filtered_cards: int
    total_links: int
    filtered_links: int


def graph_stats(graph: GraphData, filtered: GraphData) -> GraphStats:
    return GraphStats(
        total_cards=len(graph.nodes),
        filtered_cards=len(filtered.nodes),
        total_links=len(graph.links),
        filtered_links=len(filtered.links),
    )


@dataclass(frozen=True, slots=True)
class CardDetails:
    """Detail pane content for one card."""

    card: Card
    tags: dict[str, float]
    top_synergies: list[SynergyEntry]


def card_details(
    card_id: str,
    cards: Sequence[Card],
    tags_by_card: Mapping[str, Mapping[str, float]],
    synergies: SynergyMap,
    limit: int = 5,
) -> CardDetails | None:
    """
    Card attributes, tags and strongest synergies.

    Returns None if the card is not loaded. Synergy targets that are not
    loaded are skipped.
    """
    index = {card.id: card for card in cards}
    card = index.get(card_id)
    if card is None:
        return None
    top = [entry for entry in synergies.get(card_id, []) if entry.target_id in index][:limit]
    return CardDetails(
        card=card,
        tags=normalize_tags(tags_by_card.get(card_id)),
        top_synergies=top,
    )
