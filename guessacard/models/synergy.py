from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SynergyMode(str, Enum):
    """
    Synergy engine selection.

    PAIRWISE: every rule scored for every ordered pair, then weighted.
    GROUPED: cards grouped per membership rule, each group's pairs scored
    by that rule's weight function only.
    """

    PAIRWISE = "pairwise"
    GROUPED = "grouped"


@dataclass(frozen=True, slots=True)
class SynergyEntry:
    """One synergy contribution from a card towards a target card."""

    target_id: str
    points: float
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"target_id": self.target_id, "points": self.points, "rule": self.rule}


# card_id -> entries sorted by points descending
SynergyMap = dict[str, list[SynergyEntry]]


@dataclass(slots=True)
class GraphNode:
    """A card as a graph node."""

    id: str
    label: str
    val: float
    color: str
    race: str
    level: int
    value: float
    tags: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "val": self.val,
            "color": self.color,
            "race": self.race,
            "level": self.level,
            "value": self.value,
            "tags": dict(self.tags),
        }


@dataclass(slots=True)
class GraphLink:
    """An undirected synergy link between two cards."""

    source: str
    target: str
    points: float
    distance: float
    width: float
    visible: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "points": self.points,
            "distance": self.distance,
            "width": self.width,
            "visible": self.visible,
        }


@dataclass(slots=True)
class GraphData:
    """Nodes and links ready for a force-directed layout."""

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[GraphLink] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }
