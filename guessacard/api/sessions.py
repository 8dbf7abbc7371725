"""
Guess session API endpoints.

Each endpoint loads the session snapshot, applies one command, saves the
new snapshot and returns the recomputed screen (candidates, history, picker).
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from guessacard.api.dependencies import get_dataset_loader, get_load_sequencer
from guessacard.config import settings
from guessacard.db import load_state, save_snapshot
from guessacard.db.database import get_session
from guessacard.models.card import Card, Race
from guessacard.models.guess import Feedback
from guessacard.models.session import SessionState, SortOrder
from guessacard.parsers.card_import import parse_card_file
from guessacard.services.dataset_loader import DatasetLoader, LoadSequencer, resolve_fragments
from guessacard.services.guess_session import (
    add_guess,
    remove_guess,
    render_session,
    replace_cards,
    reset_guesses,
    select_level,
    select_race,
    set_sort_order,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class CardModel(BaseModel):
    """A card as shown in tables."""

    id: str
    race: Race
    level: int
    number: float
    value: float
    is_core_set: bool = False

    @classmethod
    def from_card(cls, card: Card) -> "CardModel":
        return cls(
            id=card.id,
            race=card.race,
            level=card.level,
            number=card.number,
            value=card.value,
            is_core_set=card.is_core_set,
        )


class CandidateModel(CardModel):
    """A remaining candidate, flagged when a guessed card is close to it."""

    close_signal: bool = False


class HistoryRowModel(BaseModel):
    """One numbered guess. ``card`` is null if the id is not loaded."""

    position: int
    card_id: str
    feedback: Feedback
    card: CardModel | None = None


class PickerModel(BaseModel):
    races: list[Race] = Field(default_factory=list)
    levels: list[int] = Field(default_factory=list)
    selected_race: Race | None = None
    selected_level: int | None = None
    options: list[str] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """Everything the guessing screen renders."""

    session_key: str
    candidates: list[CandidateModel] = Field(default_factory=list)
    history: list[HistoryRowModel] = Field(default_factory=list)
    picker: PickerModel = Field(default_factory=PickerModel)
    remaining: int = 0
    total: int = 0
    sort_by: SortOrder = SortOrder.RACE
    fragments: list[str] = Field(default_factory=list)
    message: str | None = None
    dropped_records: int = 0


class GuessRequest(BaseModel):
    card_id: str = Field(..., min_length=1, examples=["Marine"])
    feedback: Feedback = Field(..., examples=["close"])


class SortRequest(BaseModel):
    sort_by: SortOrder


class SelectionRequest(BaseModel):
    race: Race | None = None
    level: int | None = Field(default=None, ge=0, le=6)


class FragmentsRequest(BaseModel):
    """Expansion packs to load alongside the core set."""

    fragments: list[str] = Field(default_factory=list, examples=[["expPack1", "expPack2"]])


class ImportRequest(BaseModel):
    filename: str = Field(..., examples=["cards.csv"])
    text: str


def _to_response(
    session_key: str,
    state: SessionState,
    message: str | None = None,
    dropped: int = 0,
) -> SessionResponse:
    view = render_session(state, settings.close_threshold)
    return SessionResponse(
        session_key=session_key,
        candidates=[
            CandidateModel(**CardModel.from_card(c.card).model_dump(), close_signal=c.close_signal)
            for c in view.candidates
        ],
        history=[
            HistoryRowModel(
                position=row.position,
                card_id=row.guess.card_id,
                feedback=row.guess.feedback,
                card=CardModel.from_card(row.card) if row.card else None,
            )
            for row in view.history
        ],
        picker=PickerModel(
            races=view.picker.races,
            levels=view.picker.levels,
            selected_race=view.picker.selected_race,
            selected_level=view.picker.selected_level,
            options=[card.id for card in view.picker.options],
        ),
        remaining=view.remaining,
        total=view.total,
        sort_by=state.sort_by,
        fragments=list(state.fragments),
        message=message,
        dropped_records=dropped,
    )


@router.get("/{session_key}", response_model=SessionResponse)
async def get_session_view(
    session_key: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """Current candidates, history and picker for a session."""
    state = await load_state(session, session_key)
    return _to_response(session_key, state)


@router.post("/{session_key}/guesses", response_model=SessionResponse)
async def post_guess(
    session_key: str,
    request: GuessRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """Record a guess and its feedback."""
    state = add_guess(await load_state(session, session_key), request.card_id, request.feedback)
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state)


@router.delete("/{session_key}/guesses/{index}", response_model=SessionResponse)
async def delete_guess(
    session_key: str,
    index: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """
    Remove the guess at a zero-based position.

    Returns 400 (known failure) if the position does not exist.
    """
    state = remove_guess(await load_state(session, session_key), index)
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state)


@router.post("/{session_key}/reset", response_model=SessionResponse)
async def reset_session(
    session_key: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """Clear the guess history. Confirmation is the client's job."""
    state = reset_guesses(await load_state(session, session_key))
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state)


@router.put("/{session_key}/sort", response_model=SessionResponse)
async def put_sort(
    session_key: str,
    request: SortRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    state = set_sort_order(await load_state(session, session_key), request.sort_by)
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state)


@router.put("/{session_key}/selection", response_model=SessionResponse)
async def put_selection(
    session_key: str,
    request: SelectionRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """Set the card picker's race and level selection."""
    state = await load_state(session, session_key)
    state = select_level(select_race(state, request.race), request.level)
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state)


@router.put("/{session_key}/fragments", response_model=SessionResponse)
async def put_fragments(
    session_key: str,
    request: FragmentsRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    loader: Annotated[DatasetLoader, Depends(get_dataset_loader)],
    sequencer: Annotated[LoadSequencer, Depends(get_load_sequencer)],
) -> SessionResponse:
    """
    Reload the dataset: core plus the requested expansion packs.

    A successful reload clears the guess history. If any fragment fails,
    or a newer reload for this session started meanwhile, the session is
    left exactly as it was.
    """
    fragments = resolve_fragments(request.fragments)
    token = sequencer.begin(session_key)
    try:
        result = await loader.load(fragments)
        sequencer.ensure_current(session_key, token)

        state = replace_cards(await load_state(session, session_key), result.cards, fragments)
        await save_snapshot(session, session_key, state)
    finally:
        sequencer.finish(session_key, token)
    return _to_response(session_key, state, result.get_user_message(), result.dropped)


@router.post("/{session_key}/import", response_model=SessionResponse)
async def post_import(
    session_key: str,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionResponse:
    """
    Replace the dataset with an uploaded JSON or CSV file.

    Unsupported file types are refused with 415 and nothing is imported.
    """
    result = parse_card_file(request.filename, request.text)
    state = replace_cards(await load_state(session, session_key), result.cards)
    await save_snapshot(session, session_key, state)
    return _to_response(session_key, state, result.get_user_message(), result.dropped)
