"""
Synergy explorer service.

Glues dataset loading to the synergy engine: load cards and tags, score,
build the graph, then apply the viewer's filters. Nothing is cached; every
call rebuilds from scratch.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from guessacard.config import settings
from guessacard.models.card import Card, Race
from guessacard.models.synergy import GraphData, SynergyMap, SynergyMode
from guessacard.models.tags import TagTable, all_tag_names
from guessacard.services.dataset_loader import DatasetLoader
from guessacard.synergy.aggregate import compute_all_synergies
from guessacard.synergy.graph import (
    CardDetails,
    GraphStats,
    apply_filters,
    build_graph,
    card_details,
    graph_stats,
)


@dataclass(frozen=True)
class ExplorerDataset:
    cards: list[Card]
    tags: TagTable
    synergies: SynergyMap
    message: str
    dropped: int


@dataclass(frozen=True)
class ExplorerView:
    graph: GraphData
    stats: GraphStats
    tag_names: list[str]


async def load_explorer_dataset(
    loader: DatasetLoader,
    fragments: Iterable[str],
    mode: SynergyMode,
) -> ExplorerDataset:
    """
    Load cards and tags, then score every card.

    Raises:
        DatasetLoadError: If the tag file or any fragment fails to load
    """
    tags = await loader.load_tags()
    result = await loader.load(fragments)
    synergies = compute_all_synergies(result.cards, tags, mode)
    return ExplorerDataset(
        cards=result.cards,
        tags=tags,
        synergies=synergies,
        message=result.get_user_message(),
        dropped=result.dropped,
    )


def explore(
    dataset: ExplorerDataset,
    race: Race | None = None,
    tag: str | None = None,
    visible_only: bool = False,
) -> ExplorerView:
    """Build the full graph and the filtered view of it."""
    graph = build_graph(
        dataset.cards,
        dataset.tags,
        dataset.synergies,
        max_links_per_card=settings.max_links_per_card,
        visibility_threshold=settings.link_visibility_threshold,
    )
    filtered = apply_filters(graph, race, tag, visible_only)
    return ExplorerView(
        graph=filtered,
        stats=graph_stats(graph, filtered),
        tag_names=all_tag_names(dataset.tags),
    )


def explain_card(dataset: ExplorerDataset, card_id: str) -> CardDetails | None:
    return card_details(card_id, dataset.cards, dataset.tags, dataset.synergies)
