"""Hand-authored sector name corrections.

The override table outranks every automatically harvested id. Keys are matched on
their upper-cased trimmed form and substring matches are taken in table order, so
reordering entries changes the result for names that contain (or are contained in)
more than one key. ``"UTI"`` resolves to ``2`` below because ``"UTI 2"`` is listed
before ``"UTI 1"``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import yaml

from backend.app.config import ConfigError
from backend.app.sectors.normalization import comparison_key, is_blank

LOGGER = logging.getLogger(__name__)

DEFAULT_MANUAL_OVERRIDES: Tuple[Tuple[str, int], ...] = (
    ("PEDIATRIA", 10),
    ("UTI 2", 2),
    ("UTI 1", 1),
    ("UTI 3", 3),
    ("CENTRO CIRÚRGICO", 5),
    ("CENTRO CIRÚRGICO - 10A", 5),
    ("CENTRO CIRÚRGICO AMBULATORIAL", 5),
    ("UNIDADE DE EMERGÊNCIA", 4),
    ("UTI/UNIDADE DE EMERGÊNCIA", 4),
    ("EMERGÊNCIA", 4),
    # Diagnostic imaging is grouped under Radiologia.
    ("TOMOGRAFIA", 6),
    ("TOMOGRAFIA 2", 6),
    ("RESSONÂNCIA MAGNÉTICA", 6),
    ("RESSONANCIA MAGNÉTICA", 6),
    ("ULTRASSONOGRAFIA", 6),
    ("HEMODINÂMICA", 7),
    ("HEMODINAMICA", 7),
    ("CDC", 7),  # Centro de Diagnóstico Cardiovascular
    ("BERÇÁRIO", 11),
    ("BERÇARIO", 11),
    ("UTI NEONATAL E PEDIÁTRICA", 1),
    ("UTI INFANTIL - 8", 1),
    ("UTI INFANTIL-8", 1),
    ("UTI ADULTO I", 1),
    # Support and administrative areas.
    ("UNIDADES DE INTERNAÇÃO", 12),
    ("EDUCAÇÃO CORPORATIVA", 12),
    ("CME", 5),
    ("ENDOSCOPIA", 5),
    ("MANUTENÇÃO", 12),
    ("MANUTENCAO", 12),
    ("ROUPARIA", 12),
    ("UNIDADE 1", 12),
)


class ManualOverrideTable:
    """Immutable, ordered table of sector-name corrections."""

    def __init__(self, entries: Iterable[Tuple[str, int]]) -> None:
        table: Dict[str, int] = {}
        for raw_name, sector_id in entries:
            if is_blank(raw_name):
                raise ValueError("override names must not be blank")
            if isinstance(sector_id, bool) or not isinstance(sector_id, int) or sector_id <= 0:
                msg = f"override for '{raw_name}' must map to a positive integer id"
                raise ValueError(msg)
            key = comparison_key(raw_name)
            existing = table.get(key)
            if existing is None:
                table[key] = sector_id
                continue
            if existing != sector_id:
                msg = f"override '{key}' maps to both {existing} and {sector_id}"
                raise ValueError(msg)
        self._entries = table

    def exact(self, key: str) -> Optional[int]:
        """Return the id for an exact upper-cased trimmed ``key`` match."""

        return self._entries.get(key)

    def items(self) -> List[Tuple[str, int]]:
        """Return the entries in table order."""

        return list(self._entries.items())

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


def default_override_table() -> ManualOverrideTable:
    """Return the built-in override table."""

    return ManualOverrideTable(DEFAULT_MANUAL_OVERRIDES)


def load_override_table(path: Path) -> ManualOverrideTable:
    """Load an override table from a YAML mapping of ``name: id``.

    Args:
        path: Location of the YAML file. Entry order in the file is the table order.

    Returns:
        ManualOverrideTable: The parsed table.

    Raises:
        ConfigError: If the file is missing, malformed or inconsistent.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data: Any = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Override file missing at %s", path)
        raise ConfigError("Override file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid override YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Override file root must be a mapping: %s", path)
        raise ConfigError("Override file root must be a mapping")
    try:
        table = ManualOverrideTable((str(name), sector_id) for name, sector_id in data.items())
    except ValueError as exc:
        LOGGER.error("Invalid override entries in %s: %s", path, exc)
        raise ConfigError("Override table validation failed") from exc
    LOGGER.info("Loaded %d sector overrides from %s", len(table), path)
    return table


__all__ = [
    "DEFAULT_MANUAL_OVERRIDES",
    "ManualOverrideTable",
    "default_override_table",
    "load_override_table",
]
