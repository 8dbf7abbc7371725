from guessacard.parsers.card_import import (
    detect_format,
    parse_card_csv,
    parse_card_file,
    parse_card_json,
)

__all__ = [
    "detect_format",
    "parse_card_csv",
    "parse_card_file",
    "parse_card_json",
]
