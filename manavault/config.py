from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "ManaVault"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/manavault"

    scryfall_api_url: str = "https://api.scryfall.com"
    user_agent: str = "ManaVault/1.0"

    # Catalog gate: minimum spacing between call starts and per-call timeout
    catalog_min_interval: float = 0.1
    catalog_timeout: float = 30.0

    # Pause between resolver chunks, on top of the gate spacing
    catalog_chunk_delay: float = 0.1

    # Pause between bulk-create chunks during a large import
    bulk_chunk_delay: float = 0.05


settings = Settings()


# =============================================================================
# BATCH LIMITS
# =============================================================================

# Scryfall /cards/collection accepts at most 75 identifiers per request
SCRYFALL_CHUNK_SIZE = 75

# Bulk entry creation cap per request (hard validation error above this)
MAX_BULK_ENTRIES = 500

# Number of entries reported in the "most valuable" statistic
TOP_VALUABLE_LIMIT = 10

# Entry pagination
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
