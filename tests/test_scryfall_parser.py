"""Tests for Scryfall card object parsing."""

import pytest

from manavault.parsers.scryfall import parse_card, parse_collection_response


class TestParseCard:
    def test_single_faced_card(self) -> None:
        card = parse_card(
            {
                "id": "bolt",
                "name": "Lightning Bolt",
                "set": "LEA",
                "set_name": "Limited Edition Alpha",
                "collector_number": "161",
                "rarity": "common",
                "colors": ["R"],
                "color_identity": ["R"],
                "type_line": "Instant",
                "legalities": {"modern": "legal", "standard": "not_legal"},
                "prices": {"usd": "1.50", "usd_foil": None},
            }
        )

        assert card.id == "bolt"
        assert card.set_code == "lea"
        assert card.colors == ("R",)
        assert card.price_usd == 1.5
        assert card.price_usd_foil is None
        assert card.legalities["modern"] == "legal"
        assert card.face_names == ()

    def test_double_faced_card_uses_faces(self) -> None:
        """Colors and oracle text come from the faces when missing on top."""
        card = parse_card(
            {
                "id": "delver",
                "name": "Delver of Secrets // Insectile Aberration",
                "card_faces": [
                    {"name": "Delver of Secrets", "colors": ["U"], "oracle_text": "Upkeep"},
                    {"name": "Insectile Aberration", "colors": ["U"], "oracle_text": "Flying"},
                ],
            }
        )

        assert card.colors == ("U",)
        assert card.oracle_text == "Upkeep\nFlying"
        assert card.face_names == ("Delver of Secrets", "Insectile Aberration")

    def test_split_name_without_faces(self) -> None:
        card = parse_card({"id": "fire-ice", "name": "Fire // Ice"})

        assert card.face_names == ("Fire", "Ice")

    def test_unparseable_price(self) -> None:
        card = parse_card({"id": "x", "name": "X", "prices": {"usd": "n/a", "usd_foil": ""}})

        assert card.price_usd is None
        assert card.price_usd_foil is None

    def test_missing_id(self) -> None:
        with pytest.raises(KeyError):
            parse_card({"name": "Nameless"})


class TestParseCollectionResponse:
    def test_cards_and_not_found(self) -> None:
        cards, not_found = parse_collection_response(
            {
                "data": [{"id": "opt", "name": "Opt"}],
                "not_found": [{"name": "Not A Card"}],
            }
        )

        assert [card.name for card in cards] == ["Opt"]
        assert not_found == [{"name": "Not A Card"}]

    def test_missing_not_found(self) -> None:
        _, not_found = parse_collection_response({"data": []})

        assert not_found == []

    def test_malformed(self) -> None:
        with pytest.raises(ValueError, match="Malformed collection response"):
            parse_collection_response({"object": "error"})
