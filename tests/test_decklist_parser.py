"""Tests for the plain text decklist parser."""

from manavault.models.collection import Finish
from manavault.models.import_item import Section
from manavault.parsers.decklist import is_decklist_text, parse_decklist_text, strip_suffixes


class TestStripSuffixes:
    def test_strips_archidekt_annotations(self) -> None:
        """Category and label annotations are removed together."""
        cleaned, foil = strip_suffixes("4 Counterspell (CMR) 632 [Spells] ^My Label^")

        assert cleaned == "4 Counterspell (CMR) 632"
        assert foil is False

    def test_strips_foil_marker(self) -> None:
        cleaned, foil = strip_suffixes("1 Lightning Bolt (LEA) 161 *F*")

        assert cleaned == "1 Lightning Bolt (LEA) 161"
        assert foil is True

    def test_annotation_before_foil_marker(self) -> None:
        cleaned, foil = strip_suffixes("1 Lightning Bolt (LEA) 161 [Burn] *F*")

        assert cleaned == "1 Lightning Bolt (LEA) 161"
        assert foil is True

    def test_foil_marker_between_annotations(self) -> None:
        cleaned, foil = strip_suffixes("1 Sol Ring (C21) 263 [Ramp] *F* ^Have^")

        assert cleaned == "1 Sol Ring (C21) 263"
        assert foil is True

    def test_plain_line_unchanged(self) -> None:
        assert strip_suffixes("1 Sol Ring") == ("1 Sol Ring", False)


class TestParseDecklistText:
    def test_default_section_is_deck(self) -> None:
        """Cards before any header land in Deck."""
        result = parse_decklist_text("1 Sol Ring\n\nSideboard\n1 Rest in Peace")

        assert [card.section for card in result.all_cards] == [Section.DECK, Section.SIDEBOARD]

    def test_card_line_with_set_and_collector_number(self) -> None:
        """Annotations are stripped and the set code lowercased."""
        result = parse_decklist_text("4 Counterspell (CMR) 632 [Spells] ^My Label^")

        card = result.all_cards[0]
        assert card.name == "Counterspell"
        assert card.quantity == 4
        assert card.set_code == "cmr"
        assert card.collector_number == "632"
        assert card.finish == Finish.NONFOIL

    def test_foil_marker(self) -> None:
        result = parse_decklist_text("1 Lightning Bolt (LEA) 161 *F*")

        assert result.all_cards[0].finish == Finish.FOIL
        assert result.all_cards[0].name == "Lightning Bolt"

    def test_foil_marker_after_category(self) -> None:
        """Set and collector number survive an annotation before the marker."""
        result = parse_decklist_text("1 Lightning Bolt (LEA) 161 [Burn] *F*")

        card = result.all_cards[0]
        assert card.name == "Lightning Bolt"
        assert card.set_code == "lea"
        assert card.collector_number == "161"
        assert card.finish == Finish.FOIL

    def test_x_quantity_suffix(self) -> None:
        result = parse_decklist_text("2x Opt")

        assert result.all_cards[0].quantity == 2
        assert result.all_cards[0].name == "Opt"

    def test_double_faced_name_kept_whole(self) -> None:
        result = parse_decklist_text("1 Delver of Secrets // Insectile Aberration")

        assert result.all_cards[0].name == "Delver of Secrets // Insectile Aberration"

    def test_name_with_comma(self) -> None:
        result = parse_decklist_text("1 Atraxa, Praetors' Voice (C16) 28")

        assert result.all_cards[0].name == "Atraxa, Praetors' Voice"
        assert result.all_cards[0].set_code == "c16"

    def test_non_numeric_collector_number(self) -> None:
        result = parse_decklist_text("1 Sol Ring (PLST) C21-263")

        assert result.all_cards[0].collector_number == "C21-263"

    def test_sections_in_first_seen_order(self, sample_decklist: str) -> None:
        result = parse_decklist_text(sample_decklist)

        assert [section.name for section in result.sections] == [
            Section.COMMANDER,
            Section.DECK,
            Section.SIDEBOARD,
            Section.MAYBEBOARD,
        ]
        assert len(result.all_cards) == 6
        assert result.has_section(Section.COMMANDER)
        assert not result.has_section(Section.COMPANION)

    def test_header_aliases(self) -> None:
        """Mainboard reads as Deck and Considering as Maybeboard."""
        result = parse_decklist_text("MAINBOARD\n1 Opt\nconsidering\n1 Brainstorm")

        assert [card.section for card in result.all_cards] == [Section.DECK, Section.MAYBEBOARD]

    def test_returning_to_a_section_appends(self) -> None:
        result = parse_decklist_text("Deck\n1 Opt\nSideboard\n1 Duress\nDeck\n1 Brainstorm")

        deck = result.sections[0]
        assert deck.name == Section.DECK
        assert [card.name for card in deck.cards] == ["Opt", "Brainstorm"]

    def test_comments_and_garbage_skipped(self) -> None:
        result = parse_decklist_text("// My deck\nnot a card line\n1 Opt\n")

        assert [card.name for card in result.all_cards] == ["Opt"]

    def test_raw_index_follows_card_order(self) -> None:
        result = parse_decklist_text("1 Opt\nSideboard\n1 Duress")

        assert [card.raw_index for card in result.all_cards] == [0, 1]

    def test_crlf_input(self) -> None:
        result = parse_decklist_text("1 Opt\r\n2 Duress\r\n")

        assert [card.quantity for card in result.all_cards] == [1, 2]

    def test_empty_text(self) -> None:
        result = parse_decklist_text("   \n")

        assert result.sections == []
        assert result.all_cards == []


class TestIsDecklistText:
    def test_two_card_lines(self) -> None:
        assert is_decklist_text("1 Sol Ring\n4 Lightning Bolt") is True

    def test_single_card_line(self) -> None:
        assert is_decklist_text("1 Sol Ring") is False

    def test_csv_is_not_a_decklist(self, sample_moxfield_csv: str) -> None:
        assert is_decklist_text(sample_moxfield_csv) is False

    def test_ignores_comments(self) -> None:
        assert is_decklist_text("// 1 comment\n1 Sol Ring") is False
