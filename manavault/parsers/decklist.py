"""
Parser for plain text decklists (MTGA, Moxfield and Archidekt exports).

Line format:
    <quantity>[x] <card name>[ (<SET>)[ <collector number>]]

Example:
    Commander
    1 Atraxa, Praetors' Voice (C16) 28 *F*

    Deck
    1x Sol Ring (C21) 263 [Ramp] ^Have,#37d67a^
    1 Delver of Secrets // Insectile Aberration

Section headers (Commander, Companion, Deck/Mainboard, Sideboard,
Maybeboard/Considering) stand alone on their line and switch the section
for the lines that follow. Cards before any header belong to Deck.
Lines starting with // are comments.
"""

import re
from dataclasses import dataclass, field

from manavault.models.collection import Finish
from manavault.models.import_item import ParsedLineItem, Section

UTF8_BOM = "\ufeff"

FOIL_MARKER = "*F*"

FOIL_SUFFIX_PATTERN = re.compile(r"\s*\*F\*\s*$")

SECTION_HEADERS: dict[str, Section] = {
    "commander": Section.COMMANDER,
    "companion": Section.COMPANION,
    "deck": Section.DECK,
    "mainboard": Section.DECK,
    "sideboard": Section.SIDEBOARD,
    "maybeboard": Section.MAYBEBOARD,
    "considering": Section.MAYBEBOARD,
}

SECTION_HEADER_PATTERN = re.compile(
    r"^(" + "|".join(SECTION_HEADERS) + r")\s*$",
    re.IGNORECASE,
)

# Archidekt "[Category]" and "^Label^" annotations at end of line
ARCHIDEKT_SUFFIX_PATTERN = re.compile(r"\s*(?:\[[^\]]*\]|\^[^^]*\^,?\^?)[\s^]*$")

# Groups: (quantity, card_name, set_code, collector_number)
CARD_LINE_PATTERN = re.compile(
    r"^(\d+)x?\s+(.+?)(?:\s+\(([A-Za-z0-9]{2,6})\)(?:\s+(\S+))?)?$",
    re.IGNORECASE,
)

# Loose "quantity + name" shape used for decklist detection
CARD_DETECT_PATTERN = re.compile(r"^\d+x?\s+\S", re.IGNORECASE)

MIN_CARD_LINES_FOR_DETECTION = 2


@dataclass
class DecklistSection:
    """A section and its cards, in the order they were read."""

    name: Section
    cards: list[ParsedLineItem] = field(default_factory=list)


@dataclass
class DecklistParseResult:
    """Parsed decklist: sections in first-seen order plus every card flattened."""

    sections: list[DecklistSection] = field(default_factory=list)
    all_cards: list[ParsedLineItem] = field(default_factory=list)

    def has_section(self, section: Section) -> bool:
        return any(s.name == section for s in self.sections)


def strip_suffixes(line: str) -> tuple[str, bool]:
    """
    Remove Archidekt annotations and the foil marker from a card line.

    Annotations and a trailing foil marker are stripped repeatedly until the
    line stops changing, so combinations like "[Ramp] ^Have^ *F*" and
    "*F* [Ramp]" are all removed.

    Returns:
        Tuple of (cleaned line, foil marker found)
    """
    cleaned = line
    foil = False
    while True:
        stripped = ARCHIDEKT_SUFFIX_PATTERN.sub("", cleaned)
        stripped, marked = FOIL_SUFFIX_PATTERN.subn("", stripped)
        foil = foil or marked > 0
        if stripped == cleaned:
            break
        cleaned = stripped

    # Marker left mid-line
    idx = cleaned.rfind(FOIL_MARKER)
    if idx != -1:
        foil = True
        cleaned = cleaned[:idx] + cleaned[idx + len(FOIL_MARKER) :]

    return cleaned.strip(), foil


def _lines(text: str) -> list[str]:
    if text.startswith(UTF8_BOM):
        text = text[1:]
    return re.split(r"\r?\n", text)


def parse_decklist_text(text: str) -> DecklistParseResult:
    """
    Parse decklist text into sections and line items.

    Unrecognized lines are skipped silently. Set codes are lowercased;
    collector numbers are kept as written.

    Args:
        text: Raw decklist text

    Returns:
        DecklistParseResult. Empty if input is empty/whitespace.
    """
    result = DecklistParseResult()
    if not text or not text.strip():
        return result

    by_section: dict[Section, DecklistSection] = {}
    current = Section.DECK

    for raw_line in _lines(text):
        line = raw_line.strip()

        if not line or line.startswith("//"):
            continue

        header = SECTION_HEADER_PATTERN.match(line)
        if header:
            current = SECTION_HEADERS[header.group(1).lower()]
            continue

        cleaned, foil = strip_suffixes(line)
        match = CARD_LINE_PATTERN.match(cleaned)
        if not match:
            continue

        quantity, name, set_code, collector_number = match.groups()
        if int(quantity) < 1:
            continue

        item = ParsedLineItem(
            raw_index=len(result.all_cards),
            name=name.strip(),
            quantity=int(quantity),
            set_code=set_code.lower() if set_code else None,
            collector_number=collector_number,
            finish=Finish.FOIL if foil else Finish.NONFOIL,
            section=current,
        )

        result.all_cards.append(item)
        if current not in by_section:
            by_section[current] = DecklistSection(name=current)
            result.sections.append(by_section[current])
        by_section[current].cards.append(item)

    return result


def is_decklist_text(text: str) -> bool:
    """
    Heuristic: does this text look like a decklist rather than CSV?

    True when at least two non-blank, non-comment lines start with a
    quantity followed by a name.
    """
    if not text:
        return False

    count = 0
    for raw_line in _lines(text):
        line = raw_line.strip()
        if not line or line.startswith("//"):
            continue
        if CARD_DETECT_PATTERN.match(line):
            count += 1
            if count >= MIN_CARD_LINES_FOR_DETECTION:
                return True
    return False
