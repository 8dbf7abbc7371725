import json
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from guessacard.api.dependencies import get_dataset_loader, get_load_sequencer
from guessacard.db.database import get_session
from guessacard.main import app
from guessacard.models.card import Card, Race
from guessacard.models.db import Base
from guessacard.services.dataset_loader import DatasetLoader, LoadSequencer


def make_card(
    card_id: str,
    race: Race = Race.TERRAN,
    number: float = 1,
    value: float = 100,
    level: int = 1,
    is_core_set: bool = True,
) -> Card:
    return Card(
        id=card_id,
        race=race,
        level=level,
        number=number,
        value=value,
        is_core_set=is_core_set,
    )


@pytest.fixture
def scenario_cards() -> list[Card]:
    """X, Y, Z from the worked deduction example plus a far-away Protess card."""
    return [
        make_card("X", Race.TERRAN, number=1, value=100),
        make_card("Y", Race.ZERG, number=1, value=900),
        make_card("Z", Race.TERRAN, number=2, value=1000),
        make_card("W", Race.PROTESS, number=3, value=2000),
    ]


@pytest.fixture
def core_dataset() -> dict[str, Any]:
    return {
        "name": "核心",
        "cards": [
            {"id": "Marine", "race": "terran", "level": 1, "number": 3, "value": 100},
            {"id": "Zergling", "race": "ZERG", "level": 1, "number": 4, "value": 150},
            {"id": "Zealot", "race": "protoss", "level": 2, "number": 2, "value": 600},
            {"id": "Broken", "race": "Kerrigan", "level": 1, "number": 1, "value": 1},
        ],
    }


@pytest.fixture
def pack_dataset() -> dict[str, Any]:
    return {
        "name": "军备竞赛",
        "cards": [
            {"id": "Marine", "race": "Terran", "level": 2, "number": 3, "value": 120},
            {"id": "Thor", "race": "Terran", "level": 9, "number": 1, "value": 1800},
        ],
    }


@pytest.fixture
def tags_document() -> dict[str, Any]:
    return {
        "cardTags": {
            "Marine": {"Terran": 2, "单位": 3, "人族生化": 2, "pack": "核心"},
            "Thor": {"Terran": 1, "单位": 2, "人族机械化": 3},
            "Zergling": {"Zerg": 2, "单位": 1, "近战": 2},
            "Zealot": {"Protess": 1, "英雄": 2, "近战": 3},
        }
    }


@pytest.fixture
def data_dir(
    tmp_path: Path,
    core_dataset: dict[str, Any],
    pack_dataset: dict[str, Any],
    tags_document: dict[str, Any],
) -> Path:
    """A data directory with core, expPack1 and tags files."""
    (tmp_path / "core.json").write_text(json.dumps(core_dataset), encoding="utf-8")
    (tmp_path / "pack1JunBeiJingSai.json").write_text(json.dumps(pack_dataset), encoding="utf-8")
    (tmp_path / "tags.json").write_text(json.dumps(tags_document), encoding="utf-8")
    return tmp_path


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def sequencer() -> LoadSequencer:
    return LoadSequencer()


@pytest.fixture
async def client(async_engine, data_dir: Path, sequencer: LoadSequencer):
    """Async test client backed by an in-memory database and the test data directory."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_dataset_loader] = lambda: DatasetLoader(str(data_dir))
    app.dependency_overrides[get_load_sequencer] = lambda: sequencer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
