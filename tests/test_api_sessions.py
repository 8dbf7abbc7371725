"""Tests for the guess session endpoints."""

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from guessacard.api.dependencies import get_dataset_loader
from guessacard.main import app
from guessacard.services.dataset_loader import DatasetLoader, LoadSequencer


def candidate_ids(data: dict[str, Any]) -> list[str]:
    return [candidate["id"] for candidate in data["candidates"]]


@pytest.fixture
async def loaded(client: AsyncClient) -> dict[str, Any]:
    """Session "s1" with core plus expPack1 loaded."""
    response = await client.put("/sessions/s1/fragments", json={"fragments": ["expPack1"]})
    assert response.status_code == 200
    return response.json()


class TestSessionView:
    async def test_fresh_session_is_empty(self, client: AsyncClient) -> None:
        """An unknown session key starts with no cards and no guesses."""
        response = await client.get("/sessions/new")

        assert response.status_code == 200
        data = response.json()
        assert data["session_key"] == "new"
        assert data["candidates"] == []
        assert data["history"] == []
        assert data["total"] == 0
        assert data["fragments"] == ["core"]
        assert data["sort_by"] == "race"

    async def test_state_persists_between_requests(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "not_close"})

        data = (await client.get("/sessions/s1")).json()

        assert data["total"] == loaded["total"]
        assert [row["card_id"] for row in data["history"]] == ["Thor"]

    async def test_sessions_are_isolated(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        data = (await client.get("/sessions/other")).json()

        assert data["total"] == 0


class TestLoadFragments:
    async def test_load_merges_core_and_pack(self, loaded: dict[str, Any]) -> None:
        """Only core-set cards are candidates; the pack's Marine replaced the core one."""
        assert loaded["total"] == 4
        assert loaded["remaining"] == 2
        assert candidate_ids(loaded) == ["Zealot", "Zergling"]
        assert loaded["fragments"] == ["core", "expPack1"]
        assert loaded["dropped_records"] == 1
        assert loaded["message"] == "Loaded 4 cards from 核心, 军备竞赛 (1 invalid dropped)"

    async def test_reload_clears_history(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "close"})

        response = await client.put("/sessions/s1/fragments", json={"fragments": []})

        data = response.json()
        assert data["history"] == []
        assert data["fragments"] == ["core"]
        assert candidate_ids(data) == ["Zealot", "Marine", "Zergling"]

    async def test_failed_fragment_leaves_session_untouched(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        """A missing pack aborts the reload; guesses and cards survive."""
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "not_close"})

        response = await client.put(
            "/sessions/s1/fragments", json={"fragments": ["expPack1", "expPack2"]}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["outcome"] == "known_failure"
        assert body["failure"]["kind"] == "dataset_unavailable"

        data = (await client.get("/sessions/s1")).json()
        assert data["total"] == loaded["total"]
        assert len(data["history"]) == 1

    async def test_unknown_fragment_rejected(self, client: AsyncClient) -> None:
        response = await client.put("/sessions/s1/fragments", json={"fragments": ["expPack42"]})

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_fragments_stored_in_canonical_order(self, client: AsyncClient) -> None:
        """Duplicates collapse and core always comes first."""
        response = await client.put(
            "/sessions/s1/fragments", json={"fragments": ["expPack1", "core", "expPack1"]}
        )

        assert response.json()["fragments"] == ["core", "expPack1"]
        assert (await client.get("/sessions/s1")).json()["fragments"] == ["core", "expPack1"]

    async def test_loads_release_their_session(
        self, client: AsyncClient, sequencer: LoadSequencer
    ) -> None:
        """Applied and failed loads both leave nothing in flight."""
        for n in range(10):
            await client.put(f"/sessions/s{n}/fragments", json={"fragments": ["expPack1"]})
        await client.put("/sessions/bad/fragments", json={"fragments": ["expPack2"]})

        assert len(sequencer) == 0

    async def test_superseded_load_is_discarded(
        self, client: AsyncClient, data_dir, sequencer: LoadSequencer
    ) -> None:
        """A load overtaken by a newer one for the same session is refused."""

        class OvertakenLoader(DatasetLoader):
            async def load(self, selected=()):
                result = await super().load(selected)
                sequencer.begin("s1")
                return result

        app.dependency_overrides[get_dataset_loader] = lambda: OvertakenLoader(str(data_dir))

        response = await client.put("/sessions/s1/fragments", json={"fragments": ["expPack1"]})

        assert response.status_code == 409
        body = response.json()
        assert body["outcome"] == "refusal"
        assert body["failure"]["kind"] == "stale_load"
        assert (await client.get("/sessions/s1")).json()["total"] == 0

    async def test_unclassified_error_is_unknown_failure(
        self, client: AsyncClient, data_dir
    ) -> None:
        """An unexpected crash is reported by type only, as an unknown failure."""

        class BrokenLoader(DatasetLoader):
            async def load(self, selected=()):
                raise RuntimeError("disk on fire at /srv/data")

        app.dependency_overrides[get_dataset_loader] = lambda: BrokenLoader(str(data_dir))

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
            response = await raw_client.put("/sessions/s1/fragments", json={"fragments": []})

        assert response.status_code == 500
        body = response.json()
        assert body["outcome"] == "unknown_failure"
        assert body["failure"]["detail"] == "RuntimeError"
        assert "/srv/data" not in response.text

    async def test_repeated_failures_all_classified(self, client: AsyncClient) -> None:
        """Every failed request gets its own well-formed envelope."""
        for _ in range(25):
            response = await client.delete("/sessions/s1/guesses/3")

            assert response.status_code == 400
            assert response.json()["failure"]["kind"] == "invalid_input"


class TestGuesses:
    async def test_feedback_narrows_candidates(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "not_close"})
        response = await client.post(
            "/sessions/s1/guesses", json={"card_id": "Zergling", "feedback": "close"}
        )

        data = response.json()
        assert candidate_ids(data) == ["Zergling"]
        assert data["candidates"][0]["close_signal"] is True
        assert [row["position"] for row in data["history"]] == [1, 2]
        assert data["history"][1]["card"]["race"] == "Zerg"

    async def test_remove_guess_restores_candidates(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "not_close"})
        await client.post("/sessions/s1/guesses", json={"card_id": "Zergling", "feedback": "close"})

        response = await client.delete("/sessions/s1/guesses/1")

        data = response.json()
        assert response.status_code == 200
        assert candidate_ids(data) == ["Zealot", "Zergling"]
        assert [row["card_id"] for row in data["history"]] == ["Thor"]

    async def test_remove_missing_guess(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        response = await client.delete("/sessions/s1/guesses/5")

        assert response.status_code == 400
        body = response.json()
        assert body["outcome"] == "known_failure"
        assert body["failure"]["kind"] == "invalid_input"

    async def test_unknown_card_guess_empties_candidates(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/sessions/s1/guesses", json={"card_id": "Ghost", "feedback": "close"}
        )

        data = response.json()
        assert data["candidates"] == []
        assert data["history"][0]["card"] is None

    async def test_invalid_feedback_rejected(self, client: AsyncClient) -> None:
        response = await client.post(
            "/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "warm"}
        )

        assert response.status_code == 422

    async def test_reset(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "close"})

        data = (await client.post("/sessions/s1/reset")).json()

        assert data["history"] == []
        assert data["remaining"] == 2


class TestSortAndSelection:
    async def test_sort_by_value(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        response = await client.put("/sessions/s1/sort", json={"sort_by": "value"})

        data = response.json()
        assert data["sort_by"] == "value"
        assert candidate_ids(data) == ["Zergling", "Zealot"]

    async def test_selection_narrows_picker(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        response = await client.put("/sessions/s1/selection", json={"race": "Terran", "level": 6})

        picker = response.json()["picker"]
        assert picker["selected_race"] == "Terran"
        assert picker["selected_level"] == 6
        assert picker["levels"] == [2, 6]
        assert picker["options"] == ["Thor"]

    async def test_level_out_of_range(self, client: AsyncClient) -> None:
        response = await client.put("/sessions/s1/selection", json={"level": 9})

        assert response.status_code == 422


class TestImport:
    async def test_csv_import_replaces_cards(
        self, client: AsyncClient, loaded: dict[str, Any]
    ) -> None:
        await client.post("/sessions/s1/guesses", json={"card_id": "Thor", "feedback": "close"})
        text = "id,race,level,number,value\nHydra,Zerg,2,2,300\nProbe,Protoss,0,1,50\n"

        response = await client.post(
            "/sessions/s1/import", json={"filename": "mine.csv", "text": text}
        )

        data = response.json()
        assert response.status_code == 200
        assert candidate_ids(data) == ["Hydra"]
        assert data["history"] == []
        assert data["dropped_records"] == 1

    async def test_unsupported_file_type(self, client: AsyncClient, loaded: dict[str, Any]) -> None:
        response = await client.post(
            "/sessions/s1/import", json={"filename": "cards.xlsx", "text": "..."}
        )

        assert response.status_code == 415
        body = response.json()
        assert body["failure"]["kind"] == "unsupported_format"
        assert "Use .json or .csv" in body["failure"]["message"]
        assert (await client.get("/sessions/s1")).json()["total"] == loaded["total"]
