"""
Dataset loading service.

Fetches dataset fragments (core plus selected expansion packs) and the tag
table, either from a local directory or from an http(s) base URL, and merges
the fragments into one card collection.

INVARIANTS:
- All fragments load or none do: any failure aborts the whole merge
- The core fragment is always loaded and is the only source of core-set cards
- Duplicate ids resolve last-loaded-wins
- Malformed records are dropped and counted, never repaired
"""

import asyncio
import itertools
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from guessacard.config import BUILTIN_FRAGMENTS, CORE_FRAGMENT, settings
from guessacard.models.card import Card, card_from_record
from guessacard.models.failure import (
    DatasetLoadError,
    FailureKind,
    KnownError,
    StaleLoadError,
)
from guessacard.models.session import MergeResult
from guessacard.models.tags import TagTable, normalize_tag_table

logger = logging.getLogger(__name__)


@dataclass
class DatasetFragment:
    """Raw records from one dataset file."""

    key: str
    name: str
    records: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_core(self) -> bool:
        return self.key == CORE_FRAGMENT


def parse_dataset(key: str, data: Any) -> DatasetFragment:
    """
    Validate a ``{"name": ..., "cards": [...]}`` document.

    Raises:
        DatasetLoadError: If the document has no card list
    """
    if not isinstance(data, dict) or not isinstance(data.get("cards"), list):
        raise DatasetLoadError(key, "expected an object with a 'cards' list")
    records = [record for record in data["cards"] if isinstance(record, dict)]
    return DatasetFragment(key=key, name=str(data.get("name") or key), records=records)


def merge_fragments(fragments: Iterable[DatasetFragment]) -> MergeResult:
    """
    Merge fragments in order into one collection.

    Records are normalized first; the ones that fail are counted in
    ``dropped``. A later card with an existing id replaces the earlier one.
    """
    merged: dict[str, Card] = {}
    dropped = 0
    pack_names: list[str] = []

    for fragment in fragments:
        pack_names.append(fragment.name)
        for record in fragment.records:
            card = card_from_record(record, is_core_set=fragment.is_core)
            if card is None:
                dropped += 1
                continue
            merged[card.id] = card

    return MergeResult(cards=list(merged.values()), dropped=dropped, pack_names=pack_names)


def resolve_fragments(selected: Iterable[str]) -> list[str]:
    """
    Core first, then the selected packs in the registry's order.

    Raises:
        KnownError: For a fragment key not in the registry
    """
    requested = set(selected)
    unknown = sorted(requested - set(BUILTIN_FRAGMENTS))
    if unknown:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Unknown dataset fragment '{unknown[0]}'.",
            detail=", ".join(unknown),
        )
    return [key for key in BUILTIN_FRAGMENTS if key == CORE_FRAGMENT or key in requested]


class DatasetLoader:
    """
    Loads dataset fragments and tags from a directory or a base URL.

    Usage:
        loader = DatasetLoader("https://example.org/data")
        result = await loader.load(["expPack1"])
    """

    def __init__(
        self,
        source: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.source = source if source is not None else settings.data_source
        self._client = client
        self._timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    async def _fetch_remote(self, filename: str) -> Any:
        url = f"{self.source.rstrip('/')}/{filename}"
        if self._client is not None:
            response = await self._client.get(url, headers={"Cache-Control": "no-cache"})
            response.raise_for_status()
            return response.json()
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(url, headers={"Cache-Control": "no-cache"})
            response.raise_for_status()
            return response.json()

    def _read_local(self, filename: str) -> Any:
        path = Path(self.source) / filename
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    async def fetch_json(self, key: str, filename: str) -> Any:
        """
        Fetch and decode one JSON file.

        Raises:
            DatasetLoadError: On any network, file or decode failure
        """
        try:
            if self.is_remote:
                return await self._fetch_remote(filename)
            return await asyncio.to_thread(self._read_local, filename)
        except (httpx.HTTPError, OSError, ValueError) as e:
            raise DatasetLoadError(key, f"{type(e).__name__}: {e}") from e

    async def load_fragment(self, key: str) -> DatasetFragment:
        data = await self.fetch_json(key, BUILTIN_FRAGMENTS[key])
        return parse_dataset(key, data)

    async def load(self, selected: Iterable[str] = ()) -> MergeResult:
        """
        Load core plus the selected fragments and merge them.

        Fragments are fetched concurrently; the merge only happens once
        every fetch has succeeded.

        Raises:
            DatasetLoadError: If any fragment fails
        """
        keys = resolve_fragments(selected)
        try:
            fragments = await asyncio.gather(*(self.load_fragment(key) for key in keys))
        except DatasetLoadError as e:
            logger.error(
                "dataset_load_failed",
                extra={"fragment": e.fragment, "detail": e.detail},
            )
            raise

        result = merge_fragments(fragments)

        logger.info(
            "dataset_merged",
            extra={
                "fragments": keys,
                "cards": len(result.cards),
                "dropped": result.dropped,
            },
        )
        if result.dropped:
            logger.warning("dataset_records_dropped", extra={"dropped": result.dropped})

        return result

    async def load_tags(self) -> TagTable:
        """
        Load and normalize the ``cardTags`` table.

        Raises:
            DatasetLoadError: If the tag file cannot be fetched or decoded
        """
        data = await self.fetch_json("tags", settings.tags_file)
        if not isinstance(data, dict):
            raise DatasetLoadError("tags", "expected an object with 'cardTags'")
        return normalize_tag_table(data.get("cardTags"))


class LoadSequencer:
    """
    Orders overlapping dataset loads per session.

    Each load takes a token before fetching. When it finishes, its result
    may only be applied if no newer load for the same session has started.
    A finished load releases its session, so only in-flight loads are tracked.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def __len__(self) -> int:
        """Number of sessions with a load in flight."""
        return len(self._latest)

    def begin(self, session_key: str) -> int:
        token = next(self._counter)
        self._latest[session_key] = token
        return token

    def finish(self, session_key: str, token: int) -> None:
        """
        Release the session once its load has been applied or has failed.

        A superseded token leaves the newer load in place.
        """
        if self.is_current(session_key, token):
            del self._latest[session_key]

    def is_current(self, session_key: str, token: int) -> bool:
        return self._latest.get(session_key) == token

    def ensure_current(self, session_key: str, token: int) -> None:
        """
        Raises:
            StaleLoadError: If a newer load has started since ``token``
        """
        if not self.is_current(session_key, token):
            latest = self._latest.get(session_key, 0)
            logger.info(
                "stale_load_discarded",
                extra={"session_key": session_key, "token": token, "latest": latest},
            )
            raise StaleLoadError(token, latest)


load_sequencer = LoadSequencer()