from manavault.parsers.csv_import import (
    ColumnMapping,
    CsvFormat,
    CsvParseResult,
    detect_csv_format,
    map_columns,
    parse_csv_text,
    tokenize_csv,
)
from manavault.parsers.decklist import (
    DecklistParseResult,
    is_decklist_text,
    parse_decklist_text,
)
from manavault.parsers.scryfall import parse_card, parse_collection_response

__all__ = [
    "ColumnMapping",
    "CsvFormat",
    "CsvParseResult",
    "DecklistParseResult",
    "detect_csv_format",
    "is_decklist_text",
    "map_columns",
    "parse_card",
    "parse_collection_response",
    "parse_csv_text",
    "parse_decklist_text",
    "tokenize_csv",
]
