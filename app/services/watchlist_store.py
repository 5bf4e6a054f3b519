"""
Watchlist Store

The watchlist is one collection of WatchlistItem records keyed by
upper-case ticker, newest first. Every write replaces the whole collection;
there is no locking, so concurrent writers race and the last one wins.

Backends:
    JsonFileWatchlistStore  - data/watchlist.json (default)
    RedisWatchlistStore     - one Redis key holding the same JSON document

USAGE
-----
    store = get_watchlist_store()
    item = await store.get_item("arcc")
    await store.upsert_item(item)
    await store.delete_item("ARCC")
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import structlog

from app.core.cache import require_redis
from app.core.config import ConfigurationError, get_settings
from app.models import WatchlistItem
from app.services.utils import normalize_ticker

logger = structlog.get_logger()


class WatchlistStore(ABC):
    """Whole-collection key-value store for watchlist items."""

    @abstractmethod
    async def load(self) -> list[WatchlistItem]:
        """Read every item, newest first."""

    @abstractmethod
    async def save(self, items: list[WatchlistItem]) -> None:
        """Replace the stored collection with `items`."""

    async def get_item(self, ticker: str) -> Optional[WatchlistItem]:
        key = normalize_ticker(ticker)
        for item in await self.load():
            if item.ticker == key:
                return item
        return None

    async def upsert_item(self, item: WatchlistItem) -> WatchlistItem:
        """Replace the entry with the same ticker, or prepend a new one."""
        items = await self.load()
        for index, existing in enumerate(items):
            if existing.ticker == item.ticker:
                items[index] = item
                break
        else:
            items.insert(0, item)
        await self.save(items)
        return item

    async def delete_item(self, ticker: str) -> bool:
        """
        Remove a ticker. Deleting a ticker that is not stored is not an
        error and writes nothing. Returns True when something was removed.
        """
        key = normalize_ticker(ticker)
        items = await self.load()
        remaining = [item for item in items if item.ticker != key]
        if len(remaining) == len(items):
            return False
        await self.save(remaining)
        return True


def _dump(items: list[WatchlistItem]) -> str:
    return json.dumps([item.model_dump(mode="json") for item in items], indent=2)


def _parse(raw: str) -> list[WatchlistItem]:
    return [WatchlistItem.model_validate(record) for record in json.loads(raw)]


class JsonFileWatchlistStore(WatchlistStore):
    """Watchlist kept in a single JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    async def load(self) -> list[WatchlistItem]:
        if not self.path.exists():
            return []
        try:
            return _parse(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # Unreadable file reads as empty; the next write replaces it
            logger.warning("watchlist_store.load_failed", path=str(self.path), error=str(e))
            return []

    async def save(self, items: list[WatchlistItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(_dump(items), encoding="utf-8")


class RedisWatchlistStore(WatchlistStore):
    """Watchlist kept as one JSON document under a Redis key."""

    def __init__(self, key: str, client=None):
        self.key = key
        self._client = client

    async def _get_client(self):
        if self._client is None:
            self._client = await require_redis()
        return self._client

    async def load(self) -> list[WatchlistItem]:
        client = await self._get_client()
        raw = await client.get(self.key)
        if not raw:
            return []
        try:
            return _parse(raw)
        except ValueError as e:
            logger.warning("watchlist_store.load_failed", key=self.key, error=str(e))
            return []

    async def save(self, items: list[WatchlistItem]) -> None:
        client = await self._get_client()
        await client.set(self.key, _dump(items))


def get_watchlist_store() -> WatchlistStore:
    """Build the configured store. FastAPI dependency."""
    settings = get_settings()
    if settings.watchlist_backend == "file":
        return JsonFileWatchlistStore(settings.watchlist_path)
    if settings.watchlist_backend == "redis":
        return RedisWatchlistStore(settings.watchlist_redis_key)
    raise ConfigurationError(f"Unknown WATCHLIST_BACKEND: {settings.watchlist_backend}")
