"""Tests for import aggregation."""

from manavault.models.collection import Condition, Finish
from manavault.models.import_item import AggregatedEntry, ItemStatus, ParsedLineItem, Section
from manavault.services.aggregator import (
    COMPANION_NOTE,
    aggregate_entries,
    aggregate_line_items,
    line_item_to_entry,
)


def matched_item(
    name: str,
    scryfall_id: str,
    quantity: int = 1,
    section: Section = Section.DECK,
    **fields,
) -> ParsedLineItem:
    item = ParsedLineItem(raw_index=0, name=name, quantity=quantity, section=section, **fields)
    item.mark_matched(scryfall_id)
    return item


class TestLineItemToEntry:
    def test_deck_item(self) -> None:
        entry = line_item_to_entry(matched_item("Opt", "opt", quantity=3))

        assert entry == AggregatedEntry(scryfall_id="opt", quantity=3)

    def test_commander_flag(self) -> None:
        entry = line_item_to_entry(matched_item("Atraxa", "atraxa", section=Section.COMMANDER))

        assert entry is not None
        assert entry.is_commander is True
        assert entry.is_sideboard is False

    def test_sideboard_flag(self) -> None:
        entry = line_item_to_entry(matched_item("Duress", "duress", section=Section.SIDEBOARD))

        assert entry is not None
        assert entry.is_sideboard is True

    def test_companion_is_sideboard_with_note(self) -> None:
        entry = line_item_to_entry(
            matched_item("Lurrus", "lurrus", section=Section.COMPANION, notes="mine")
        )

        assert entry is not None
        assert entry.is_sideboard is True
        assert entry.notes == COMPANION_NOTE

    def test_maybeboard_dropped(self) -> None:
        assert line_item_to_entry(matched_item("Opt", "opt", section=Section.MAYBEBOARD)) is None

    def test_unresolved_items_dropped(self) -> None:
        pending = ParsedLineItem(raw_index=0, name="Opt")
        unmatched = ParsedLineItem(raw_index=1, name="Opt", status=ItemStatus.UNMATCHED)
        skipped = ParsedLineItem(raw_index=2, name="Opt", status=ItemStatus.SKIPPED)

        assert [line_item_to_entry(i) for i in (pending, unmatched, skipped)] == [None] * 3


class TestAggregateEntries:
    def test_sums_matching_keys(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id="bolt", quantity=2),
            AggregatedEntry(scryfall_id="bolt", quantity=3),
        ]

        assert aggregate_entries(entries) == [AggregatedEntry(scryfall_id="bolt", quantity=5)]

    def test_finish_and_condition_split_keys(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id="bolt", quantity=4),
            AggregatedEntry(scryfall_id="bolt", quantity=2, finish=Finish.FOIL),
            AggregatedEntry(scryfall_id="bolt", quantity=1, condition=Condition.LP),
        ]

        result = aggregate_entries(entries)

        assert sorted((e.finish, e.condition, e.quantity) for e in result) == sorted(
            [
                (Finish.NONFOIL, Condition.NM, 4),
                (Finish.FOIL, Condition.NM, 2),
                (Finish.NONFOIL, Condition.LP, 1),
            ]
        )

    def test_role_flags_split_keys(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id="opt", quantity=1),
            AggregatedEntry(scryfall_id="opt", quantity=1, is_sideboard=True),
        ]

        assert len(aggregate_entries(entries)) == 2

    def test_first_non_empty_price_and_notes_win(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id="opt", quantity=1),
            AggregatedEntry(scryfall_id="opt", quantity=1, purchase_price=0.5, notes="first"),
            AggregatedEntry(scryfall_id="opt", quantity=1, purchase_price=0.9, notes="second"),
        ]

        (entry,) = aggregate_entries(entries)

        assert entry.quantity == 3
        assert entry.purchase_price == 0.5
        assert entry.notes == "first"

    def test_idempotent(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id="a", quantity=1),
            AggregatedEntry(scryfall_id="a", quantity=2),
            AggregatedEntry(scryfall_id="b", quantity=1, is_commander=True),
        ]

        once = aggregate_entries(entries)

        assert sorted(aggregate_entries(once), key=repr) == sorted(once, key=repr)

    def test_conserves_total_quantity(self) -> None:
        entries = [
            AggregatedEntry(scryfall_id=card_id, quantity=qty)
            for card_id, qty in [("a", 1), ("b", 4), ("a", 3), ("c", 2), ("b", 1)]
        ]

        result = aggregate_entries(entries)

        assert sum(e.quantity for e in result) == 11
        assert len({e.key for e in result}) == len(result) == 3

    def test_empty(self) -> None:
        assert aggregate_entries([]) == []


class TestAggregateLineItems:
    def test_mixed_sections(self) -> None:
        items = [
            matched_item("Atraxa", "atraxa", section=Section.COMMANDER),
            matched_item("Forest", "forest", quantity=5),
            matched_item("Forest", "forest", quantity=5),
            matched_item("Rest in Peace", "rip", section=Section.SIDEBOARD),
            matched_item("Counterspell", "counter", section=Section.MAYBEBOARD),
            ParsedLineItem(raw_index=9, name="Nope", status=ItemStatus.UNMATCHED),
        ]

        result = {e.scryfall_id: e for e in aggregate_line_items(items)}

        assert set(result) == {"atraxa", "forest", "rip"}
        assert result["atraxa"].is_commander is True
        assert result["forest"].quantity == 10
        assert result["rip"].is_sideboard is True

    def test_csv_rows_with_distinct_finish(self) -> None:
        items = [
            matched_item("Lightning Bolt", "bolt", quantity=4),
            matched_item("Lightning Bolt", "bolt", quantity=2, finish=Finish.FOIL),
        ]

        result = aggregate_line_items(items)

        assert sorted((e.finish, e.quantity) for e in result) == [
            (Finish.FOIL, 2),
            (Finish.NONFOIL, 4),
        ]
