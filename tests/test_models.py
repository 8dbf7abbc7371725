"""Tests for card, tag and session models."""

import math

import pytest

from guessacard.models.card import (
    Card,
    Race,
    card_from_record,
    normalize_level,
    normalize_race,
)
from guessacard.models.guess import Feedback, Guess
from guessacard.models.session import SessionState, SortOrder
from guessacard.models.tags import all_tag_names, normalize_tag_table, normalize_tags


class TestNormalizeRace:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Terran", Race.TERRAN),
            ("  zerg ", Race.ZERG),
            ("PROTOSS", Race.PROTESS),
            ("protess", Race.PROTESS),
            ("Neutral", Race.NEUTRAL),
        ],
    )
    def test_recognized_spellings(self, text: str, expected: Race) -> None:
        assert normalize_race(text) == expected

    @pytest.mark.parametrize("text", ["", "Kerrigan", None, "terrans"])
    def test_unrecognized_is_none(self, text: str | None) -> None:
        assert normalize_race(text) is None


class TestNormalizeLevel:
    def test_clamps_high(self) -> None:
        assert normalize_level(9) == 6

    def test_clamps_low(self) -> None:
        assert normalize_level(-3) == 0

    def test_floors_fraction(self) -> None:
        assert normalize_level("3.7") == 3

    @pytest.mark.parametrize("value", [None, "abc", math.nan, math.inf])
    def test_non_numeric_is_none(self, value: object) -> None:
        assert normalize_level(value) is None


class TestCardFromRecord:
    def test_normalizes_fields(self) -> None:
        card = card_from_record(
            {"id": " Marine ", "race": "terran", "level": "2", "number": "3", "value": 100},
            is_core_set=True,
        )

        assert card == Card("Marine", Race.TERRAN, 2, 3.0, 100.0, True)

    def test_id_falls_back_to_race_and_number(self) -> None:
        card = card_from_record({"race": "Zerg", "level": 1, "number": 4, "value": 10})

        assert card is not None
        assert card.id == "Zerg-4"

    @pytest.mark.parametrize(
        "record",
        [
            {"id": "a", "race": "Orc", "level": 1, "number": 1, "value": 1},
            {"id": "a", "race": "Zerg", "level": "x", "number": 1, "value": 1},
            {"id": "a", "race": "Zerg", "level": 1, "number": None, "value": 1},
            {"id": "a", "race": "Zerg", "level": 1, "number": 1, "value": "lots"},
        ],
    )
    def test_malformed_record_is_dropped(self, record: dict) -> None:
        assert card_from_record(record) is None


class TestTags:
    def test_non_numeric_weights_become_zero(self) -> None:
        tags = normalize_tags({"单位": 3, "pack": "核心", "飞行": "2", "bad": None, "nan": math.nan})

        assert tags == {"单位": 3.0, "pack": 0.0, "飞行": 2.0, "bad": 0.0, "nan": 0.0}

    def test_table_skips_non_mapping_entries(self) -> None:
        table = normalize_tag_table({"Marine": {"单位": 1}, "Junk": "nope"})

        assert list(table) == ["Marine"]

    def test_all_tag_names_sorted(self) -> None:
        table = normalize_tag_table({"a": {"飞行": 1, "Terran": 1}, "b": {"Terran": 2}})

        assert all_tag_names(table) == sorted(["飞行", "Terran"])


class TestSessionSnapshot:
    def test_snapshot_restores_session(self) -> None:
        state = SessionState(
            cards=(Card("Marine", Race.TERRAN, 1, 3, 100, True),),
            guesses=(Guess("Marine", Feedback.NOT_CLOSE),),
            sort_by=SortOrder.VALUE,
            fragments=("core", "expPack2"),
            selected_race=Race.TERRAN,
            selected_level=1,
        )

        assert SessionState.from_snapshot(state.to_snapshot()) == state

    def test_damaged_snapshot_degrades_gracefully(self) -> None:
        state = SessionState.from_snapshot(
            {
                "cards": [
                    {"id": "x", "race": "???", "level": 1, "number": 1, "value": 1},
                    "garbage",
                    None,
                    7,
                    {"id": "Marine", "race": "Terran", "level": 1, "number": 3, "value": 100},
                ],
                "guesses": [{"card_id": "x", "feedback": "maybe"}, {"oops": 1}, "Thor", 3],
                "sort_by": "colour",
                "fragments": 5,
            }
        )

        assert [card.id for card in state.cards] == ["Marine"]
        assert state.guesses == ()
        assert state.sort_by == SortOrder.RACE
        assert state.fragments == ("core",)

    @pytest.mark.parametrize(
        "snapshot",
        [
            {"cards": "garbage"},
            {"cards": 42, "guesses": 42},
            {"guesses": {"card_id": "Thor", "feedback": "close"}},
            {"fragments": None, "sort_by": ["value"]},
            {"fragments": "expPack1"},
            {"fragments": []},
            ["not", "a", "mapping"],
        ],
    )
    def test_structurally_broken_snapshot_is_fresh_session(self, snapshot) -> None:
        assert SessionState.from_snapshot(snapshot) == SessionState()

    def test_empty_snapshot_is_fresh_session(self) -> None:
        assert SessionState.from_snapshot(None) == SessionState()
