"""Fuzzy reconciliation of free-text sector names against known ids."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from backend.app.sectors.normalization import comparison_key, is_blank
from backend.app.sectors.overrides import ManualOverrideTable, default_override_table
from backend.app.sectors.resolver import resolve_sector_id

LOGGER = logging.getLogger(__name__)


class MatchSource(str, Enum):
    """Step of the reconciliation chain that produced an id."""

    OVERRIDE_EXACT = "override_exact"
    OVERRIDE_PARTIAL = "override_partial"
    CATALOG_EXACT = "catalog_exact"
    CATALOG_PARTIAL = "catalog_partial"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one sector name."""

    name: str
    sector_id: Optional[int]
    source: Optional[MatchSource]

    @property
    def mapped(self) -> bool:
        return self.sector_id is not None


def _contains_either_way(left: str, right: str) -> bool:
    return left in right or right in left


class SectorReconciler:
    """Assign sector ids to free-text names.

    The chain is evaluated in a fixed order and the first hit wins:

    1. exact match against the manual override table;
    2. substring containment, in either direction, against the override table;
    3. exact match against the external catalog;
    4. substring containment against the external catalog;
    5. the resolver fallback, which always produces an id.

    Manual corrections therefore outrank harvested data and exact matches outrank
    containment. Containment ties are settled by table (or catalog insertion) order.
    """

    def __init__(
        self,
        overrides: Optional[ManualOverrideTable] = None,
        *,
        log_ambiguous_matches: bool = False,
    ) -> None:
        self._overrides = overrides if overrides is not None else default_override_table()
        self._log_ambiguous = log_ambiguous_matches

    @property
    def overrides(self) -> ManualOverrideTable:
        return self._overrides

    def reconcile(self, raw_name: Optional[str], catalog: Mapping[str, int]) -> Optional[int]:
        """Return the sector id for ``raw_name`` or ``None`` for blank input."""

        return self.explain(raw_name, catalog).sector_id

    def explain(self, raw_name: Optional[str], catalog: Mapping[str, int]) -> ReconciliationResult:
        """Reconcile ``raw_name`` and report which step produced the id.

        Args:
            raw_name: Free-text sector name.
            catalog: External catalog keyed by upper-cased trimmed name.

        Returns:
            ReconciliationResult: Unmapped only when ``raw_name`` is blank.
        """
        if raw_name is None or is_blank(raw_name):
            return ReconciliationResult(name=raw_name or "", sector_id=None, source=None)
        key = comparison_key(raw_name)

        exact_override = self._overrides.exact(key)
        if exact_override is not None:
            return ReconciliationResult(raw_name, exact_override, MatchSource.OVERRIDE_EXACT)

        partial_override = self._first_containing(key, self._overrides.items(), "override")
        if partial_override is not None:
            return ReconciliationResult(raw_name, partial_override, MatchSource.OVERRIDE_PARTIAL)

        exact_catalog = catalog.get(key)
        if exact_catalog is not None:
            return ReconciliationResult(raw_name, exact_catalog, MatchSource.CATALOG_EXACT)

        partial_catalog = self._first_containing(key, catalog.items(), "catalog")
        if partial_catalog is not None:
            return ReconciliationResult(raw_name, partial_catalog, MatchSource.CATALOG_PARTIAL)

        return ReconciliationResult(raw_name, resolve_sector_id(raw_name), MatchSource.FALLBACK)

    def _first_containing(
        self,
        key: str,
        entries: Iterable[Tuple[str, int]],
        table: str,
    ) -> Optional[int]:
        matches: List[Tuple[str, int]] = []
        for candidate, sector_id in entries:
            if not candidate or not _contains_either_way(key, candidate):
                continue
            matches.append((candidate, sector_id))
            if not self._log_ambiguous:
                break
        if not matches:
            return None
        if len(matches) > 1:
            LOGGER.debug(
                "Ambiguous %s match for '%s': %s; using '%s'",
                table,
                key,
                ", ".join(f"{name}={sector_id}" for name, sector_id in matches),
                matches[0][0],
            )
        return matches[0][1]


__all__ = ["MatchSource", "ReconciliationResult", "SectorReconciler"]
