from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from travel_content.core.config import settings
from travel_content.db.session import dispose_engine, get_engine
from travel_content.services.activity_details import DetailCardCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan context manager for startup/shutdown events."""
    sweeper: asyncio.Task[None] | None = None
    try:
        # Startup
        if settings.environment != "test":
            await verify_database_connection()
        services = getattr(app.state, "services", None) or {}
        card_cache = services.get("detail_card_cache")
        if isinstance(card_cache, DetailCardCache):
            sweeper = asyncio.create_task(
                sweep_detail_cards(card_cache, settings.detail_card_sweep_interval_seconds)
            )
        yield

        # Shutdown
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await dispose_engine()


async def verify_database_connection() -> None:
    """Verify database connectivity at startup. Raises if connection fails."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        raise RuntimeError(f"Failed to connect to database: {e}") from e


async def sweep_detail_cards(cache: DetailCardCache, interval_seconds: float) -> None:
    """Periodically evict expired detail cards until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await cache.sweep_expired()
        except Exception as e:
            logger.error(f"Detail card sweep failed. Error: {e}")
