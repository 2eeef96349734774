from manavault.api.cards import router as cards_router
from manavault.api.collections import router as collections_router
from manavault.api.health import router as health_router
from manavault.api.imports import router as imports_router
from manavault.api.reports import router as reports_router
from manavault.api.sharing import router as sharing_router
from manavault.api.sharing import shared_router

__all__ = [
    "cards_router",
    "collections_router",
    "health_router",
    "imports_router",
    "reports_router",
    "shared_router",
    "sharing_router",
]
