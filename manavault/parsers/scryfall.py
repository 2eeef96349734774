"""
Scryfall card object parsing.

Turns raw Scryfall JSON card objects into immutable CatalogCard records.

Card objects: https://scryfall.com/docs/api/cards
"""

from typing import Any

from manavault.models.card import CatalogCard
from manavault.models.import_item import FACE_SEPARATOR


def _parse_price(raw: Any) -> float | None:
    """Scryfall prices are decimal strings or null."""
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _faces(data: dict[str, Any]) -> list[dict[str, Any]]:
    faces = data.get("card_faces")
    return faces if isinstance(faces, list) else []


def parse_card(data: dict[str, Any]) -> CatalogCard:
    """
    Parse one Scryfall card object.

    Double-faced cards may omit top-level colors and oracle text; these are
    taken from the faces instead.

    Raises:
        KeyError: If the object has no id or name
    """
    faces = _faces(data)
    name = str(data["name"])

    colors = data.get("colors")
    if colors is None and faces:
        seen: list[str] = []
        for face in faces:
            for color in face.get("colors") or []:
                if color not in seen:
                    seen.append(color)
        colors = seen

    oracle_text = data.get("oracle_text")
    if oracle_text is None and faces:
        oracle_text = "\n".join(str(face.get("oracle_text", "")) for face in faces)

    if faces:
        face_names = tuple(str(face.get("name", "")) for face in faces if face.get("name"))
    elif FACE_SEPARATOR in name:
        face_names = tuple(name.split(FACE_SEPARATOR))
    else:
        face_names = ()

    prices = data.get("prices") or {}

    return CatalogCard(
        id=str(data["id"]),
        name=name,
        set_code=str(data.get("set", "")).lower(),
        set_name=str(data.get("set_name", "")),
        collector_number=str(data.get("collector_number", "")),
        rarity=str(data.get("rarity", "")),
        colors=tuple(colors or ()),
        color_identity=tuple(data.get("color_identity") or ()),
        type_line=str(data.get("type_line", "")),
        oracle_text=str(oracle_text or ""),
        legalities=dict(data.get("legalities") or {}),
        price_usd=_parse_price(prices.get("usd")),
        price_usd_foil=_parse_price(prices.get("usd_foil")),
        face_names=face_names,
    )


def parse_collection_response(
    payload: dict[str, Any],
) -> tuple[list[CatalogCard], list[dict[str, Any]]]:
    """
    Parse a /cards/collection response body.

    Returns:
        Tuple of (found cards, not_found identifiers)

    Raises:
        ValueError: If the body is not a collection response
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ValueError("Malformed collection response: missing 'data' list")

    cards = [parse_card(card) for card in payload["data"]]
    not_found = list(payload.get("not_found") or [])
    return cards, not_found
