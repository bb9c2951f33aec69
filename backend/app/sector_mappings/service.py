"""Map maintenance-API sectors onto system sectors using the persisted table."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.app.config import SectorMappingsConfig
from backend.app.contracts import SectorRecord
from backend.app.sector_mappings.models import SectorMappingBase
from backend.app.sector_mappings.repository import SectorMappingRepository

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MappingEntry:
    """Immutable snapshot of an active mapping row."""

    external_sector_name: str
    external_sector_id: Optional[int]
    system_sector_id: int


class SectorMappingService:
    """Look up system sector ids for external sectors with a short-lived cache."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session_factory = session_factory
        self._ttl = max(0.0, float(cache_ttl_seconds))
        self._clock = clock
        self._lock = asyncio.Lock()
        self._cache: Optional[Tuple[MappingEntry, ...]] = None
        self._cached_at = 0.0

    async def load_mappings(self) -> Tuple[MappingEntry, ...]:
        """Return active mappings, served from cache while it is fresh.

        Database failures are logged and yield an empty table; they are not cached.
        """
        async with self._lock:
            now = self._clock()
            if self._cache is not None and self._ttl > 0 and now - self._cached_at < self._ttl:
                return self._cache
            try:
                async with self._session_factory() as session:
                    rows = await SectorMappingRepository(session).list_active()
                    entries = tuple(
                        MappingEntry(
                            external_sector_name=row.external_sector_name,
                            external_sector_id=row.external_sector_id,
                            system_sector_id=row.system_sector_id,
                        )
                        for row in rows
                    )
            except SQLAlchemyError:
                LOGGER.exception("Failed to load sector mappings; treating table as empty")
                return ()
            self._cache = entries
            self._cached_at = now
            LOGGER.debug("Loaded %d active sector mappings", len(entries))
            return entries

    def invalidate_cache(self) -> None:
        """Forget cached mappings; call after creating, updating or deleting rows."""

        self._cache = None
        self._cached_at = 0.0

    async def map_sector(
        self,
        external_sector_name: Optional[str],
        external_sector_id: Optional[int] = None,
    ) -> Optional[int]:
        """Return the system sector id for an external sector.

        A mapping matching both the trimmed name and the external id wins over one
        matching the name only.

        Args:
            external_sector_name: Sector name as reported by the maintenance API.
            external_sector_id: Optional sector id reported alongside the name.

        Returns:
            Optional[int]: The mapped system sector id or ``None``.
        """
        if external_sector_name is None or not external_sector_name.strip():
            return None
        name = external_sector_name.strip()
        mappings = await self.load_mappings()
        if external_sector_id is not None:
            for entry in mappings:
                if (
                    entry.external_sector_name == name
                    and entry.external_sector_id == external_sector_id
                ):
                    return entry.system_sector_id
        for entry in mappings:
            if entry.external_sector_name == name:
                return entry.system_sector_id
        return None

    async def map_sectors(
        self, sectors: Iterable[Tuple[Optional[str], Optional[int]]]
    ) -> List[int]:
        """Map ``(name, external_id)`` pairs to distinct system ids in first-seen order."""

        system_ids: List[int] = []
        for name, external_id in sectors:
            mapped = await self.map_sector(name, external_id)
            if mapped is not None and mapped not in system_ids:
                system_ids.append(mapped)
        return system_ids

    async def filter_by_system_sectors(
        self, items: Sequence[T], system_sector_ids: Sequence[int]
    ) -> List[T]:
        """Keep the items whose mapped system sector is in ``system_sector_ids``.

        An empty id list disables filtering and returns every item.
        """
        if not system_sector_ids:
            return list(items)
        wanted = set(system_sector_ids)
        filtered: List[T] = []
        for item in items:
            record = SectorRecord.from_payload(item)
            mapped = await self.map_sector(record.sector_name, record.sector_id)
            if mapped is not None and mapped in wanted:
                filtered.append(item)
        return filtered


def create_session_factory(
    config: SectorMappingsConfig,
) -> Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the engine and session factory for the mapping database."""

    engine = create_async_engine(config.database_url, future=True)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the sector mapping tables when missing."""

    async with engine.begin() as connection:
        await connection.run_sync(SectorMappingBase.metadata.create_all)


__all__ = [
    "MappingEntry",
    "SectorMappingService",
    "create_schema",
    "create_session_factory",
]
