from dataclasses import dataclass
from enum import Enum
from typing import Any


class Feedback(str, Enum):
    """Feedback received after guessing a card."""

    CLOSE = "close"
    NOT_CLOSE = "not_close"


@dataclass(frozen=True, slots=True)
class Guess:
    """
    A guessed card and the feedback it received.

    Order within a history only matters for display numbering and
    removal by index, never for filtering.
    """

    card_id: str
    feedback: Feedback

    def to_dict(self) -> dict[str, Any]:
        return {"card_id": self.card_id, "feedback": self.feedback.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Guess":
        return cls(card_id=str(data["card_id"]), feedback=Feedback(data["feedback"]))
