import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from manavault.api import (
    cards_router,
    collections_router,
    health_router,
    imports_router,
    reports_router,
    shared_router,
    sharing_router,
)
from manavault.config import settings
from manavault.db.database import init_db
from manavault.models.failure import ApiResponse, FailureKind, KnownError
from manavault.services.catalog_client import create_scryfall_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler for startup/shutdown.

    Creates the one catalog client (and rate-limit gate) shared by every
    request for the life of the process.
    """
    await init_db()
    app.state.catalog_client = create_scryfall_client()
    try:
        yield
    finally:
        await app.state.catalog_client.aclose()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("manavault"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    logger.info("Known failure (%s): %s", exc.kind.value, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    response = ApiResponse.known_failure(
        kind=FailureKind.INVALID_INPUT,
        message="Request validation failed",
        detail="; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=response.model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(collections_router)
app.include_router(health_router)
app.include_router(imports_router)
app.include_router(reports_router)
app.include_router(shared_router)
app.include_router(sharing_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
