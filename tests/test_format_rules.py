"""Tests for deck format construction rules."""

import pytest

from manavault.models.collection import DeckType
from manavault.models.format_rules import (
    DECK_FORMAT_RULES,
    are_partners_compatible,
    get_format_rule,
    is_basic_land,
)


class TestFormatRules:
    def test_every_deck_type_has_a_rule(self) -> None:
        assert set(DECK_FORMAT_RULES) == set(DeckType)

    def test_rules_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            rule = get_format_rule(DeckType.STANDARD)
            DECK_FORMAT_RULES[DeckType.OTHER] = rule  # type: ignore[index]

    def test_commander_rule(self) -> None:
        rule = get_format_rule(DeckType.COMMANDER)

        assert rule.min_deck_size == rule.max_deck_size == 100
        assert rule.singleton is True
        assert rule.copy_limit == 1
        assert rule.max_commanders == 2
        assert rule.sideboard_size == 0
        assert rule.legality_key == "commander"

    def test_oathbreaker_rule(self) -> None:
        rule = get_format_rule(DeckType.OATHBREAKER)

        assert rule.min_deck_size == rule.max_deck_size == 60
        assert rule.max_commanders == 1
        assert rule.requires_signature_spell is True
        assert rule.commander_label == "Oathbreaker"

    def test_constructed_copy_limit(self) -> None:
        rule = get_format_rule(DeckType.STANDARD)

        assert rule.copy_limit == 4
        assert rule.min_deck_size == 60
        assert rule.max_deck_size is None
        assert rule.uses_set_legality is False

    def test_planar_standard_uses_sets(self) -> None:
        rule = get_format_rule(DeckType.PLANAR_STANDARD)

        assert rule.uses_set_legality is True
        assert "fdn" in rule.legal_sets
        assert set(rule.legal_set_names) == set(rule.legal_sets)
        assert "Cori-steel Cutter" in rule.banned_cards

    def test_draft_has_no_copy_limit(self) -> None:
        rule = get_format_rule(DeckType.DRAFT)

        assert rule.copy_limit is None
        assert rule.min_deck_size == 40

    def test_other_disables_everything(self) -> None:
        rule = get_format_rule(DeckType.OTHER)

        assert rule.min_deck_size is None
        assert rule.copy_limit is None
        assert rule.requires_commander is False
        assert rule.legality_key is None
        assert rule.uses_set_legality is False


class TestIsBasicLand:
    @pytest.mark.parametrize("name", ["Plains", "Island", "Swamp", "Mountain", "Forest", "Wastes"])
    def test_basics(self, name: str) -> None:
        assert is_basic_land(name) is True

    def test_snow_covered(self) -> None:
        assert is_basic_land("Snow-Covered Island") is True

    def test_non_basics(self) -> None:
        assert is_basic_land("Snow-Covered Lightning Bolt") is False
        assert is_basic_land("Island Sanctuary") is False
        assert is_basic_land("") is False
        assert is_basic_land(None) is False


PIR_TEXT = "Partner with Toothy, Imaginary Friend"
TOOTHY_TEXT = "Partner with Pir, Imaginative Rascal"


class TestArePartnersCompatible:
    def test_generic_partner(self) -> None:
        tymna = {"name": "Tymna the Weaver", "oracle_text": "Lifelink\nPartner"}
        thrasios = {"name": "Thrasios, Triton Hero", "oracle_text": "Partner"}

        assert are_partners_compatible(tymna, thrasios) is True

    def test_partner_with_named_card(self) -> None:
        pir = {"name": "Pir, Imaginative Rascal", "oracle_text": PIR_TEXT}
        toothy = {"name": "Toothy, Imaginary Friend", "oracle_text": TOOTHY_TEXT}

        assert are_partners_compatible(pir, toothy) is True

    def test_partner_with_does_not_pair_with_generic_partner(self) -> None:
        pir = {"name": "Pir, Imaginative Rascal", "oracle_text": PIR_TEXT}
        tymna = {"name": "Tymna the Weaver", "oracle_text": "Partner"}

        assert are_partners_compatible(pir, tymna) is False

    def test_background(self) -> None:
        commander = {"name": "Wilson", "oracle_text": "Choose a Background"}
        background = {"name": "Raised by Giants", "type_line": "Legendary Enchantment - Background"}

        assert are_partners_compatible(commander, background) is True
        assert are_partners_compatible(background, commander) is True

    def test_doctors_companion(self) -> None:
        companion = {"name": "Clara Oswald", "oracle_text": "Doctor's companion"}
        doctor = {
            "name": "The Eleventh Doctor",
            "type_line": "Legendary Creature - Time Lord Doctor",
        }

        assert are_partners_compatible(companion, doctor) is True

    def test_unrelated_commanders(self) -> None:
        atraxa = {"name": "Atraxa, Praetors' Voice", "oracle_text": "Flying, vigilance"}
        edgar = {"name": "Edgar Markov", "oracle_text": "Eminence"}

        assert are_partners_compatible(atraxa, edgar) is False
