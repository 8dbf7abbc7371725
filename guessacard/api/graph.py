"""
Synergy graph API endpoints.

Serves node/link data for a force-directed renderer, plus per-card details.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from guessacard.api.dependencies import get_dataset_loader
from guessacard.config import settings
from guessacard.models.card import Race
from guessacard.models.synergy import SynergyMode
from guessacard.services.dataset_loader import DatasetLoader
from guessacard.services.synergy_explorer import explain_card, explore, load_explorer_dataset

router = APIRouter(prefix="/graph", tags=["graph"])


class NodeModel(BaseModel):
    id: str
    label: str
    val: float
    color: str
    race: str
    level: int
    value: float
    tags: dict[str, float] = Field(default_factory=dict)


class LinkModel(BaseModel):
    source: str
    target: str
    points: float
    distance: float
    width: float
    visible: bool


class GraphStatsModel(BaseModel):
    total_cards: int = 0
    filtered_cards: int = 0
    total_links: int = 0
    filtered_links: int = 0


class GraphResponse(BaseModel):
    """Graph data after race/tag/visibility filters."""

    mode: SynergyMode
    nodes: list[NodeModel] = Field(default_factory=list)
    links: list[LinkModel] = Field(default_factory=list)
    stats: GraphStatsModel = Field(default_factory=GraphStatsModel)
    races: list[Race] = Field(default_factory=lambda: list(Race))
    tag_names: list[str] = Field(default_factory=list)
    message: str | None = None
    dropped_records: int = 0


class SynergyModel(BaseModel):
    target_id: str
    points: float
    rule: str | None = None


class CardDetailsResponse(BaseModel):
    id: str
    race: Race
    level: int
    number: float
    value: float
    tags: dict[str, float] = Field(default_factory=dict)
    top_synergies: list[SynergyModel] = Field(default_factory=list)


def _mode(mode: SynergyMode | None) -> SynergyMode:
    return mode if mode is not None else SynergyMode(settings.synergy_mode)


@router.get("", response_model=GraphResponse)
async def get_graph(
    loader: Annotated[DatasetLoader, Depends(get_dataset_loader)],
    fragments: Annotated[list[str], Query()] = [],  # noqa: B006
    mode: SynergyMode | None = None,
    race: Race | None = None,
    tag: str | None = None,
    visible_only: bool = False,
) -> GraphResponse:
    """
    Build the synergy graph for core plus the given expansion packs.

    Links below the visibility threshold stay in the data with
    ``visible=false`` unless ``visible_only`` is set.
    """
    selected_mode = _mode(mode)
    dataset = await load_explorer_dataset(loader, fragments, selected_mode)
    view = explore(dataset, race, tag, visible_only)
    graph: dict[str, Any] = view.graph.to_dict()

    return GraphResponse(
        mode=selected_mode,
        nodes=[NodeModel(**node) for node in graph["nodes"]],
        links=[LinkModel(**link) for link in graph["links"]],
        stats=GraphStatsModel(
            total_cards=view.stats.total_cards,
            filtered_cards=view.stats.filtered_cards,
            total_links=view.stats.total_links,
            filtered_links=view.stats.filtered_links,
        ),
        tag_names=view.tag_names,
        message=dataset.message,
        dropped_records=dataset.dropped,
    )


@router.get("/cards/{card_id}", response_model=CardDetailsResponse)
async def get_card_details(
    card_id: str,
    loader: Annotated[DatasetLoader, Depends(get_dataset_loader)],
    fragments: Annotated[list[str], Query()] = [],  # noqa: B006
    mode: SynergyMode | None = None,
) -> CardDetailsResponse:
    """A card's tags and its five strongest synergies."""
    dataset = await load_explorer_dataset(loader, fragments, _mode(mode))
    details = explain_card(dataset, card_id)
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card '{card_id}' is not in the loaded dataset",
        )

    return CardDetailsResponse(
        id=details.card.id,
        race=details.card.race,
        level=details.card.level,
        number=details.card.number,
        value=details.card.value,
        tags=details.tags,
        top_synergies=[SynergyModel(**entry.to_dict()) for entry in details.top_synergies],
    )
