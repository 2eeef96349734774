"""
Parser for CSV collection exports (Deckbox, Moxfield and similar tools).

Tokenizing is a best-effort state machine over comma or tab delimited text
with RFC4180-style double-quote escaping. It never raises on malformed
quoting. Header columns are mapped to line item fields either by synonym
detection or by an explicit column mapping supplied by the caller.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from manavault.models.collection import Condition, Finish
from manavault.models.import_item import ParsedLineItem

UTF8_BOM = "\ufeff"
DELIMITERS = frozenset({",", "\t"})
LINE_BREAKS = frozenset({"\r", "\n"})


class CsvFormat(str, Enum):
    """Export tool a CSV header most likely came from."""

    DECKBOX = "Deckbox"
    MOXFIELD = "Moxfield"
    UNKNOWN = "Unknown"


class _State(Enum):
    FIELD_START = "field_start"
    UNQUOTED = "unquoted"
    QUOTED = "quoted"
    QUOTED_SAW_QUOTE = "quoted_saw_quote"


def tokenize_csv(text: str) -> list[list[str]]:
    """
    Split CSV text into rows of string cells.

    Handles quoted fields containing delimiters and newlines, "" escapes,
    CRLF/LF/CR line endings and a final row without a trailing newline.
    Rows consisting of a single empty cell (blank lines) are dropped.

    Args:
        text: Raw CSV text, optionally BOM-prefixed

    Returns:
        Rows in input order; the first row is normally the header.
    """
    if text.startswith(UTF8_BOM):
        text = text[1:]

    rows: list[list[str]] = []
    row: list[str] = []
    cell: list[str] = []
    state = _State.FIELD_START
    i = 0
    length = len(text)

    def end_row() -> None:
        if len(row) > 1 or (len(row) == 1 and row[0] != ""):
            rows.append(list(row))
        row.clear()

    while i < length:
        ch = text[i]

        if state == _State.QUOTED:
            if ch == '"':
                state = _State.QUOTED_SAW_QUOTE
            else:
                cell.append(ch)
            i += 1
            continue

        if state == _State.QUOTED_SAW_QUOTE and ch == '"':
            # "" inside a quoted field is a literal quote
            cell.append('"')
            state = _State.QUOTED
            i += 1
            continue

        if ch in DELIMITERS:
            row.append("".join(cell))
            cell.clear()
            state = _State.FIELD_START
            i += 1
            continue

        if ch in LINE_BREAKS:
            row.append("".join(cell))
            cell.clear()
            end_row()
            state = _State.FIELD_START
            i += 2 if ch == "\r" and i + 1 < length and text[i + 1] == "\n" else 1
            continue

        if state == _State.FIELD_START and ch == '"':
            state = _State.QUOTED
        else:
            # Stray text after a closing quote is kept as-is
            cell.append(ch)
            state = _State.UNQUOTED
        i += 1

    if state != _State.FIELD_START or cell or row:
        row.append("".join(cell))
        end_row()

    return rows


def detect_csv_format(headers: list[str]) -> CsvFormat:
    """
    Guess which tool produced a CSV from its header names.

    UNKNOWN is an expected outcome: the caller must then supply an
    explicit ColumnMapping.
    """
    lower = {h.strip().lower() for h in headers}
    has_purchase_price = "purchase price" in lower
    has_collector_number = "collector number" in lower

    has_deckbox_columns = "type" in lower and "rarity" in lower and not has_purchase_price

    if "tradelist count" in lower or has_deckbox_columns:
        return CsvFormat.DECKBOX
    if has_purchase_price or has_collector_number:
        return CsvFormat.MOXFIELD
    if "name" in lower and ("count" in lower or "qty" in lower):
        return CsvFormat.MOXFIELD
    return CsvFormat.UNKNOWN


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Column index for each line item field; None when the column is absent."""

    name: int
    quantity: int | None = None
    set_code: int | None = None
    collector_number: int | None = None
    condition: int | None = None
    purchase_price: int | None = None
    foil: int | None = None
    notes: int | None = None


HEADER_SYNONYMS: dict[str, tuple[str, ...]] = {
    "quantity": ("count", "qty", "quantity"),
    "name": ("name", "card name", "card"),
    "set_code": ("edition", "set", "set code", "set_code"),
    "collector_number": ("collector number", "collector_number", "card number"),
    "condition": ("condition",),
    "purchase_price": ("purchase price", "price", "my price"),
    "foil": ("foil",),
    "notes": ("notes",),
}


def _header_index(headers: list[str], synonyms: tuple[str, ...]) -> int | None:
    lower = [h.strip().lower() for h in headers]
    for synonym in synonyms:
        if synonym in lower:
            return lower.index(synonym)
    return None


def map_columns(headers: list[str]) -> ColumnMapping | None:
    """
    Auto-map header names to fields using HEADER_SYNONYMS.

    Returns:
        ColumnMapping, or None if no name column could be found.
    """
    indices = {field: _header_index(headers, names) for field, names in HEADER_SYNONYMS.items()}
    name_idx = indices.pop("name")
    if name_idx is None:
        return None
    return ColumnMapping(name=name_idx, **indices)


CONDITION_SYNONYMS: dict[str, Condition] = {
    "mint": Condition.MINT,
    "m": Condition.MINT,
    "near mint": Condition.NM,
    "nm": Condition.NM,
    "lightly played": Condition.LP,
    "lp": Condition.LP,
    "good (lightly played)": Condition.LP,
    "moderately played": Condition.MP,
    "mp": Condition.MP,
    "played": Condition.MP,
    "heavily played": Condition.HP,
    "hp": Condition.HP,
    "damaged": Condition.DAMAGED,
    "d": Condition.DAMAGED,
    "dm": Condition.DAMAGED,
}

FINISH_SYNONYMS: dict[str, Finish] = {
    "foil": Finish.FOIL,
    "yes": Finish.FOIL,
    "1": Finish.FOIL,
    "true": Finish.FOIL,
    "etched": Finish.ETCHED,
}


def normalize_condition(raw: str | None) -> Condition:
    """Lenient condition lookup; anything unrecognized is NM."""
    if not raw:
        return Condition.NM
    return CONDITION_SYNONYMS.get(raw.strip().lower(), Condition.NM)


def normalize_finish(raw: str | None) -> Finish:
    """Lenient finish lookup; anything unrecognized is nonfoil."""
    if not raw:
        return Finish.NONFOIL
    return FINISH_SYNONYMS.get(raw.strip().lower(), Finish.NONFOIL)


_NON_PRICE_CHARS = re.compile(r"[^0-9.]")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_price(raw: str | None) -> float | None:
    """
    Parse a price like "$1,234.50" -> 1234.5.

    Everything except digits and dots is stripped. Empty, zero and
    unparsable values read as None.
    """
    if not raw:
        return None
    cleaned = _NON_PRICE_CHARS.sub("", raw)
    if not cleaned:
        return None
    try:
        price = float(cleaned)
    except ValueError:
        # e.g. "1.2.3" reads as 1.2
        match = re.match(r"\d*\.?\d+", cleaned)
        if not match:
            return None
        price = float(match.group(0))
    if math.isnan(price) or price <= 0:
        return None
    return price


def parse_quantity(raw: str | None) -> int:
    """Leading integer of the cell; defaults to 1 when missing or < 1."""
    if not raw:
        return 1
    match = _LEADING_INT.match(raw)
    if not match:
        return 1
    quantity = int(match.group(1))
    return quantity if quantity >= 1 else 1


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def rows_to_line_items(rows: list[list[str]], mapping: ColumnMapping) -> list[ParsedLineItem]:
    """
    Map data rows (header excluded) to line items.

    Rows with an empty name are dropped. raw_index is the position of the
    row among the data rows.
    """
    items: list[ParsedLineItem] = []

    for idx, row in enumerate(rows):
        name = _cell(row, mapping.name).strip()
        if not name:
            continue

        set_code = _cell(row, mapping.set_code).strip().lower() or None
        collector_number = _cell(row, mapping.collector_number).strip() or None
        notes = _cell(row, mapping.notes).strip() or None

        items.append(
            ParsedLineItem(
                raw_index=idx,
                name=name,
                quantity=parse_quantity(_cell(row, mapping.quantity)),
                set_code=set_code,
                collector_number=collector_number,
                condition=normalize_condition(_cell(row, mapping.condition)),
                finish=normalize_finish(_cell(row, mapping.foil)),
                notes=notes,
                purchase_price=parse_price(_cell(row, mapping.purchase_price)),
            )
        )

    return items


@dataclass
class CsvParseResult:
    """Result of parsing a CSV export."""

    format: CsvFormat
    headers: list[str]
    items: list[ParsedLineItem]
    requires_mapping: bool = False


def parse_csv_text(text: str, mapping: ColumnMapping | None = None) -> CsvParseResult:
    """
    Parse CSV export text into line items.

    With no explicit mapping, the header is auto-mapped. An UNKNOWN format
    (or a header with no name column) without an explicit mapping returns
    no items and requires_mapping=True.

    Args:
        text: Raw CSV text
        mapping: Explicit column mapping, overriding auto-detection
    """
    rows = tokenize_csv(text or "")
    if not rows:
        return CsvParseResult(format=CsvFormat.UNKNOWN, headers=[], items=[])

    headers, data_rows = rows[0], rows[1:]
    csv_format = detect_csv_format(headers)

    if mapping is None:
        mapping = map_columns(headers) if csv_format != CsvFormat.UNKNOWN else None
        if mapping is None:
            return CsvParseResult(
                format=csv_format, headers=headers, items=[], requires_mapping=True
            )

    return CsvParseResult(
        format=csv_format,
        headers=headers,
        items=rows_to_line_items(data_rows, mapping),
    )
