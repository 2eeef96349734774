from manavault.models.card import CatalogCard
from manavault.models.collection import (
    Collection,
    CollectionEntry,
    CollectionType,
    Condition,
    DeckType,
    Finish,
    Visibility,
)
from manavault.models.failure import (
    ApiResponse,
    CatalogUnavailableError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    RateLimitTimeoutError,
)
from manavault.models.format_rules import (
    DECK_FORMAT_RULES,
    FormatRule,
    get_format_rule,
    is_basic_land,
)
from manavault.models.import_item import (
    AggregatedEntry,
    AggregationKey,
    CardIdentity,
    ItemStatus,
    ParsedLineItem,
    Section,
)
from manavault.models.statistics import CollectionStats, ValuableEntry
from manavault.models.validation import IssueType, ValidationIssue, ValidationResult

__all__ = [
    "AggregatedEntry",
    "AggregationKey",
    "ApiResponse",
    "CardIdentity",
    "CatalogCard",
    "CatalogUnavailableError",
    "Collection",
    "CollectionEntry",
    "CollectionStats",
    "CollectionType",
    "Condition",
    "DECK_FORMAT_RULES",
    "DeckType",
    "FailureDetail",
    "FailureKind",
    "Finish",
    "FormatRule",
    "ItemStatus",
    "IssueType",
    "KnownError",
    "OutcomeType",
    "ParsedLineItem",
    "RateLimitTimeoutError",
    "Section",
    "ValidationIssue",
    "ValidationResult",
    "ValuableEntry",
    "Visibility",
    "get_format_rule",
    "is_basic_land",
]
