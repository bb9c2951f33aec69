"""SQLAlchemy ORM models for the external-to-system sector mapping table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class SectorMappingBase(DeclarativeBase):
    """Base declarative class for sector mapping models."""


class SectorMapping(SectorMappingBase):
    """Maps a sector as named by the maintenance API to a system sector id."""

    __tablename__ = "sector_mappings"
    __table_args__ = (
        UniqueConstraint(
            "external_sector_name",
            "external_sector_id",
            name="uq_sector_mappings_external",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_sector_name: Mapped[str] = mapped_column(String(255), index=True)
    external_sector_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    system_sector_id: Mapped[int] = mapped_column(Integer)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
