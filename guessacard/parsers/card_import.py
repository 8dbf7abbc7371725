"""
Parser for user-supplied card files.

Supports:
- JSON: {"name": ..., "cards": [{id, race, level, number, value}, ...]}
- CSV: header row with id (optional), race, level, number, value

CSV rows are stricter than JSON records: levels below 1 are rejected.
Anything else is refused outright, never partially imported.
"""

import csv
import json
from io import StringIO
from typing import Literal

from guessacard.models.card import normalize_level
from guessacard.models.failure import FailureKind, KnownError, UnsupportedFormatError
from guessacard.models.session import MergeResult
from guessacard.services.dataset_loader import DatasetFragment, merge_fragments

MIN_CSV_LEVEL = 1
CSV_FIELDS = ("id", "race", "level", "number", "value")

ImportFormat = Literal["json", "csv"]


def detect_format(filename: str) -> ImportFormat:
    """
    Pick the import format from a file name.

    Raises:
        UnsupportedFormatError: For anything but .json or .csv
    """
    lowered = filename.lower()
    if lowered.endswith(".json"):
        return "json"
    if lowered.endswith(".csv"):
        return "csv"
    suffix = lowered.rsplit(".", 1)[-1] if "." in lowered else lowered
    raise UnsupportedFormatError(suffix or filename)


def parse_card_csv(text: str) -> MergeResult:
    """
    Parse CSV card rows.

    Column names are matched case-insensitively. Rows without an id get
    "race-number". Imported cards are treated as core-set cards.
    """
    reader = csv.DictReader(StringIO(text.strip()))
    if not reader.fieldnames:
        return MergeResult()

    columns = {name.strip().lower(): name for name in reader.fieldnames if name}

    records: list[dict[str, str | None]] = []
    dropped = 0
    for row in reader:
        record = {key: row.get(column) for key, column in columns.items() if key in CSV_FIELDS}
        level = normalize_level(record.get("level"))
        if level is None or level < MIN_CSV_LEVEL:
            dropped += 1
            continue
        records.append(record)

    result = merge_fragments([DatasetFragment(key="core", name="csv", records=records)])
    result.dropped += dropped
    return result


def parse_card_json(text: str) -> MergeResult:
    """
    Parse a JSON dataset document.

    Raises:
        KnownError: If the text is not a dataset document
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="The file is not valid JSON.",
            detail=str(e),
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("cards"), list):
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Expected a JSON object with a 'cards' list.",
        )

    name = str(data.get("name") or "import")
    records = [record for record in data["cards"] if isinstance(record, dict)]
    non_records = len(data["cards"]) - len(records)
    result = merge_fragments([DatasetFragment(key="core", name=name, records=records)])
    result.dropped += non_records
    return result


def parse_card_file(filename: str, text: str) -> MergeResult:
    """Dispatch on the file name's extension."""
    if detect_format(filename) == "csv":
        return parse_card_csv(text)
    return parse_card_json(text)

