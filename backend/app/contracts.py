"""Immutable data contracts for the sector resolution backend."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

SECTOR_NAME_ALIASES: Tuple[str, ...] = ("sector_name", "Setor", "setor", "sectorName")
SECTOR_ID_ALIASES: Tuple[str, ...] = ("sector_id", "SetorId", "sectorId", "setorId")


def coerce_sector_id(value: Any) -> Optional[int]:
    """Return a positive integer id or ``None``.

    Args:
        value: Raw id as delivered by the collaborator.

    Returns:
        Optional[int]: The id when it is a positive integer (ASCII numeric strings
            included), otherwise ``None``. Zero is never a valid sector id.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not (stripped.isascii() and stripped.isdigit()):
            return None
        value = int(stripped)
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def _first_sector_name(payload: Mapping[str, Any]) -> Optional[str]:
    names = [payload[key] for key in SECTOR_NAME_ALIASES if isinstance(payload.get(key), str)]
    for name in names:
        if name.strip():
            return name
    return names[0] if names else None


def _first_sector_id(payload: Mapping[str, Any]) -> Optional[int]:
    for key in SECTOR_ID_ALIASES:
        sector_id = coerce_sector_id(payload.get(key))
        if sector_id is not None:
            return sector_id
    return None


class _FrozenBaseModel(BaseModel):
    """Base model enforcing immutability after creation."""

    model_config = ConfigDict(frozen=True)


class SectorRecord(_FrozenBaseModel):
    """Narrow view of an equipment, work-order or legacy record.

    Collaborators spell the sector fields differently (``Setor``/``SetorId`` on the
    maintenance API, ``setor``/``sectorId`` on locally stored records); every other
    field is ignored. When several spellings are present, the first one holding a
    usable value wins, so ``{"Setor": None, "setor": "UTI 1"}`` keeps ``"UTI 1"``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    sector_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(*SECTOR_NAME_ALIASES),
    )
    sector_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices(*SECTOR_ID_ALIASES),
    )

    @model_validator(mode="before")
    @classmethod
    def _pick_usable_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        picked: Dict[str, Any] = {
            "sector_name": _first_sector_name(data),
            "sector_id": _first_sector_id(data),
        }
        return picked

    @field_validator("sector_name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> Optional[str]:
        """Drop non-string sector names instead of failing the whole record."""

        if isinstance(value, str):
            return value
        return None

    @field_validator("sector_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[int]:
        return coerce_sector_id(value)

    @property
    def has_name(self) -> bool:
        """Return whether the record carries a non-blank sector name."""

        return bool(self.sector_name and self.sector_name.strip())

    @classmethod
    def from_payload(cls, payload: Any) -> "SectorRecord":
        """Build a record from a collaborator payload.

        Args:
            payload: A mapping, an existing :class:`SectorRecord`, or anything else
                (treated as a record without sector information).

        Returns:
            SectorRecord: The narrowed record.
        """
        if isinstance(payload, SectorRecord):
            return payload
        if isinstance(payload, Mapping):
            return cls.model_validate(dict(payload))
        return cls()
