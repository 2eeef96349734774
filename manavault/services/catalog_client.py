"""
Scryfall API client.

Every request goes through the shared RateLimitGate, so all features
(search, import resolution, statistics, validation) share one request
budget.

API docs: https://scryfall.com/docs/api
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from manavault.config import SCRYFALL_CHUNK_SIZE, Settings, settings
from manavault.models.card import CatalogCard
from manavault.parsers.scryfall import parse_card, parse_collection_response
from manavault.services.rate_limiter import RateLimitGate


@dataclass
class CatalogLookup:
    """Result of one /cards/collection batch lookup."""

    cards: list[CatalogCard] = field(default_factory=list)
    not_found: list[dict[str, Any]] = field(default_factory=list)


class ScryfallClient:
    """
    Thin async wrapper over the Scryfall REST API.

    Args:
        http: Client with base_url pointing at the Scryfall API
        gate: Shared rate-limit gate
    """

    def __init__(self, http: httpx.AsyncClient, gate: RateLimitGate) -> None:
        self._http = http
        self.gate = gate

    async def get_collection(self, identifiers: list[dict[str, str]]) -> CatalogLookup:
        """
        Batch lookup of up to 75 identifiers.

        Identifiers are {"id": ...}, {"name": ..., "set"?: ...} or
        {"set": ..., "collector_number": ...}.

        Raises:
            ValueError: If more than SCRYFALL_CHUNK_SIZE identifiers are given,
                or the response body is malformed
            httpx.HTTPError: On network failure or non-2xx response
            RateLimitTimeoutError: If the request exceeds the gate timeout
        """
        if len(identifiers) > SCRYFALL_CHUNK_SIZE:
            raise ValueError(
                f"At most {SCRYFALL_CHUNK_SIZE} identifiers per request, got {len(identifiers)}"
            )
        if not identifiers:
            return CatalogLookup()

        async def call() -> Any:
            response = await self._http.post(
                "/cards/collection", json={"identifiers": identifiers}
            )
            response.raise_for_status()
            return response.json()

        payload = await self.gate.run(call)
        cards, not_found = parse_collection_response(payload)
        return CatalogLookup(cards=cards, not_found=not_found)

    async def get_card(self, card_id: str) -> CatalogCard | None:
        """
        Fetch one card by Scryfall ID.

        Returns:
            CatalogCard, or None if Scryfall has no such card.
        """

        async def call() -> Any:
            response = await self._http.get(f"/cards/{card_id}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        data = await self.gate.run(call)
        return parse_card(data) if data is not None else None

    async def search(self, query: str, page: int = 1) -> list[CatalogCard]:
        """
        Full-text card search (one result page).

        Returns:
            Matching cards; empty when Scryfall reports no matches.
        """

        async def call() -> Any:
            response = await self._http.get("/cards/search", params={"q": query, "page": page})
            if response.status_code == 404:
                return {"data": []}
            response.raise_for_status()
            return response.json()

        payload = await self.gate.run(call)
        return [parse_card(card) for card in payload.get("data", [])]

    async def aclose(self) -> None:
        await self._http.aclose()


def create_scryfall_client(
    gate: RateLimitGate | None = None,
    config: Settings = settings,
) -> ScryfallClient:
    """Build a client (and, if not given, a gate) from application settings."""
    if gate is None:
        gate = RateLimitGate(
            min_interval=config.catalog_min_interval,
            timeout=config.catalog_timeout,
        )
    http = httpx.AsyncClient(
        base_url=config.scryfall_api_url,
        headers={"User-Agent": config.user_agent, "Accept": "application/json"},
        timeout=config.catalog_timeout,
    )
    return ScryfallClient(http, gate)
