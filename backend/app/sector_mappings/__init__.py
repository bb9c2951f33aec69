"""Persisted mapping from maintenance-API sectors to system sectors."""

from backend.app.sector_mappings.models import SectorMapping, SectorMappingBase
from backend.app.sector_mappings.repository import SectorMappingRepository
from backend.app.sector_mappings.service import (
    MappingEntry,
    SectorMappingService,
    create_schema,
    create_session_factory,
)

__all__ = [
    "MappingEntry",
    "SectorMapping",
    "SectorMappingBase",
    "SectorMappingRepository",
    "SectorMappingService",
    "create_schema",
    "create_session_factory",
]
