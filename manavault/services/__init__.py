"""
ManaVault services.

Catalog access, import orchestration and the pure deck/collection
computations built on top of it.
"""

from manavault.services.aggregator import aggregate_entries, aggregate_line_items
from manavault.services.catalog_client import CatalogLookup, ScryfallClient, create_scryfall_client
from manavault.services.catalog_resolver import CatalogIndex, CatalogResolver, ResolveSummary
from manavault.services.collection_stats import compute_collection_stats
from manavault.services.csv_export import ExportLayout, build_csv
from manavault.services.deck_validator import validate_deck
from manavault.services.import_service import (
    ImportKind,
    ImportOutcome,
    ImportPreview,
    ImportService,
    detect_import_kind,
)
from manavault.services.rate_limiter import RateLimitGate

__all__ = [
    "CatalogIndex",
    "CatalogLookup",
    "CatalogResolver",
    "ExportLayout",
    "ImportKind",
    "ImportOutcome",
    "ImportPreview",
    "ImportService",
    "RateLimitGate",
    "ResolveSummary",
    "ScryfallClient",
    "aggregate_entries",
    "aggregate_line_items",
    "build_csv",
    "compute_collection_stats",
    "create_scryfall_client",
    "detect_import_kind",
    "validate_deck",
]
