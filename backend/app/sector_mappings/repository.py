"""Repository handling persistence for sector mappings."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.sector_mappings.models import SectorMapping


class SectorMappingRepository:
    """Provide database access helpers for the sector mapping table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Return the underlying SQLAlchemy session."""

        return self._session

    async def create(
        self,
        external_sector_name: str,
        system_sector_id: int,
        *,
        external_sector_id: Optional[int] = None,
        active: bool = True,
    ) -> SectorMapping:
        """Persist a new mapping for a trimmed external sector name."""

        mapping = SectorMapping(
            external_sector_name=external_sector_name.strip(),
            external_sector_id=external_sector_id,
            system_sector_id=system_sector_id,
            active=active,
        )
        self._session.add(mapping)
        await self._session.flush()
        return mapping

    async def find(self, mapping_id: int) -> Optional[SectorMapping]:
        """Retrieve a mapping by identifier."""

        result = await self._session.execute(
            select(SectorMapping).where(SectorMapping.id == mapping_id)
        )
        return result.scalar_one_or_none()

    async def list_active(self) -> List[SectorMapping]:
        """Return active mappings ordered by identifier."""

        result = await self._session.execute(
            select(SectorMapping)
            .where(SectorMapping.active.is_(True))
            .order_by(SectorMapping.id)
        )
        return list(result.scalars().all())

    async def update(
        self,
        mapping: SectorMapping,
        *,
        system_sector_id: Optional[int] = None,
        external_sector_id: Optional[int] = None,
        active: Optional[bool] = None,
    ) -> SectorMapping:
        """Apply the provided changes to ``mapping``."""

        if system_sector_id is not None:
            mapping.system_sector_id = system_sector_id
        if external_sector_id is not None:
            mapping.external_sector_id = external_sector_id
        if active is not None:
            mapping.active = active
        await self._session.flush()
        return mapping

    async def delete(self, mapping: SectorMapping) -> None:
        """Remove ``mapping`` from the table."""

        await self._session.delete(mapping)
        await self._session.flush()
