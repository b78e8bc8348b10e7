"""
Pydantic Settings for the illustration engine, loaded from environment variables.

Every variable is read with the ``ILLUSTRATION_`` prefix, e.g.
``ILLUSTRATION_BATCH_CHUNK_SIZE=500``.
"""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Batch projection ─────────────────────
    BATCH_CHUNK_SIZE: int = 1000
    BATCH_STRICT_VALIDATION: bool = True
    BULK_MAX_POLICIES: int = 10000

    # ── HTTP adapter ─────────────────────────
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # ── Logging ──────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = {"env_prefix": "ILLUSTRATION_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
