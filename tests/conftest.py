from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from manavault.api.dependencies import get_catalog_client
from manavault.db.database import build_engine, get_session
from manavault.main import app
from manavault.models.card import CatalogCard
from manavault.models.db import Base
from manavault.services.catalog_client import CatalogLookup
from manavault.services.rate_limiter import RateLimitGate


class FakeCatalogClient:
    """
    In-memory stand-in for ScryfallClient.

    Answers /cards/collection style identifiers from a fixed card list and
    records every batch it receives. Set `error` to make every call raise.
    """

    def __init__(self, cards: list[CatalogCard] | None = None) -> None:
        self.cards: list[CatalogCard] = list(cards or [])
        self.calls: list[list[dict[str, str]]] = []
        self.error: Exception | None = None
        self.gate = RateLimitGate(min_interval=0.0)

    def add(self, *cards: CatalogCard) -> None:
        self.cards.extend(cards)

    def _find(self, identifier: dict[str, str]) -> CatalogCard | None:
        for card in self.cards:
            if "id" in identifier:
                if card.id == identifier["id"]:
                    return card
            elif "collector_number" in identifier:
                if (card.set_code, card.collector_number) == (
                    identifier["set"].lower(),
                    identifier["collector_number"],
                ):
                    return card
            else:
                names = {card.name.lower(), *(face.lower() for face in card.face_names)}
                if identifier["name"].lower() not in names:
                    continue
                if "set" in identifier and identifier["set"].lower() != card.set_code:
                    continue
                return card
        return None

    async def get_collection(self, identifiers: list[dict[str, str]]) -> CatalogLookup:
        self.calls.append(list(identifiers))
        if self.error is not None:
            raise self.error
        lookup = CatalogLookup()
        for identifier in identifiers:
            card = self._find(identifier)
            if card is None:
                lookup.not_found.append(identifier)
            elif card not in lookup.cards:
                lookup.cards.append(card)
        return lookup

    async def get_card(self, card_id: str) -> CatalogCard | None:
        if self.error is not None:
            raise self.error
        return next((card for card in self.cards if card.id == card_id), None)

    async def search(self, query: str, page: int = 1) -> list[CatalogCard]:
        if self.error is not None:
            raise self.error
        return [card for card in self.cards if query.lower() in card.name.lower()]

    async def aclose(self) -> None:
        pass


def build_card(name: str, **overrides: Any) -> CatalogCard:
    """CatalogCard with a deterministic id derived from the name."""
    fields: dict[str, Any] = {
        "id": "id-" + name.lower().replace(" ", "-").replace(",", "").replace("/", ""),
        "name": name,
        "set_code": "tst",
        "set_name": "Test Set",
        "collector_number": "1",
        "rarity": "common",
        "legalities": {
            "standard": "legal",
            "commander": "legal",
            "modern": "legal",
            "oathbreaker": "legal",
        },
    }
    fields.update(overrides)
    return CatalogCard(**fields)


@pytest.fixture
def make_card() -> Callable[..., CatalogCard]:
    return build_card


@pytest.fixture
def fake_catalog() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def sample_decklist() -> str:
    """Moxfield-style decklist export with sections."""
    return """Commander
1 Atraxa, Praetors' Voice (C16) 28 *F*

Deck
1x Sol Ring (C21) 263 [Ramp] ^Have,#37d67a^
1 Delver of Secrets // Insectile Aberration
10 Forest

Sideboard
1 Rest in Peace

Maybeboard
1 Counterspell"""


@pytest.fixture
def sample_moxfield_csv() -> str:
    return (
        "Count,Name,Edition,Condition,Language,Foil,Collector Number,Purchase Price\n"
        '4,"Lightning Bolt",lea,Near Mint,English,,161,$1.50\n'
        '1,"Jace, the Mind Sculptor",wwk,LP,English,foil,31,"$89.99"\n'
    )


@pytest.fixture
def sample_deckbox_csv() -> str:
    return (
        "Count,Tradelist Count,Name,Edition,Card Number,Condition,Foil\n"
        "2,0,Counterspell,Alpha,55,Played,\n"
    )


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine, fake_catalog: FakeCatalogClient):
    """Async test client with the database and catalog client overridden."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_catalog_client] = lambda: fake_catalog

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
