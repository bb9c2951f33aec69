"""Read-only collaborators listing equipment and work orders."""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from typing_extensions import Protocol

from backend.app.config import AppConfig, EffortAPIConfig, SourcesConfig

LOGGER = logging.getLogger(__name__)

_ENVELOPE_KEYS = ("Itens", "data", "items")


class SectorSourceError(RuntimeError):
    """Raised when a collaborator cannot deliver a record listing."""


class SectorSource(Protocol):
    """Protocol describing the listings the catalog builder consumes."""

    def list_equipment(self) -> Sequence[Mapping[str, Any]]:
        ...

    def list_work_orders_summary(self) -> Sequence[Mapping[str, Any]]:
        ...


def _unwrap_listing(payload: Any, *, origin: str) -> List[Mapping[str, Any]]:
    """Return the record list from a bare list or a paginated envelope."""

    items: Any = payload
    if isinstance(payload, Mapping):
        items = None
        for key in _ENVELOPE_KEYS:
            candidate = payload.get(key)
            if isinstance(candidate, list):
                items = candidate
                break
    if not isinstance(items, list):
        msg = f"{origin} did not return a list of records"
        raise SectorSourceError(msg)
    return [item for item in items if isinstance(item, Mapping)]


class EffortSectorSource:
    """HTTP client for the maintenance-management API listings."""

    def __init__(
        self,
        config: EffortAPIConfig,
        *,
        client: Optional[httpx.Client] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=config.base_url, timeout=config.timeout_seconds
        )
        env = environ if environ is not None else os.environ
        self._api_keys: Dict[str, Optional[str]] = {
            config.equipment_path: env.get(config.equipment_api_key_env),
            config.work_orders_path: env.get(config.work_orders_api_key_env),
        }

    def close(self) -> None:
        """Close the underlying HTTP client when it was created internally."""

        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "EffortSectorSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def list_equipment(self) -> List[Mapping[str, Any]]:
        """Return the equipment listing."""

        return self._get(self._config.equipment_path, self._config.equipment_params)

    def list_work_orders_summary(self) -> List[Mapping[str, Any]]:
        """Return the summarized work-order listing."""

        return self._get(self._config.work_orders_path, self._config.work_order_params)

    def _get(self, path: str, params: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        headers: Dict[str, str] = {}
        token = self._api_keys.get(path)
        if token:
            headers[self._config.auth_header] = token
        else:
            LOGGER.warning("No API key configured for %s", path)
        start_time = time.monotonic()
        try:
            response = self._client.get(path, params=dict(params), headers=headers)
        except httpx.HTTPError as exc:
            latency_ms = (time.monotonic() - start_time) * 1000
            LOGGER.error(
                "Maintenance API request raised an error",
                extra={"path": path, "latency_ms": latency_ms, "error": str(exc)},
            )
            msg = f"Request to {path} failed: {exc}"
            raise SectorSourceError(msg) from exc
        latency_ms = (time.monotonic() - start_time) * 1000
        if response.status_code >= 400:
            LOGGER.warning(
                "Maintenance API returned an error status",
                extra={
                    "path": path,
                    "status_code": response.status_code,
                    "latency_ms": latency_ms,
                },
            )
            msg = f"{path} returned {response.status_code}"
            raise SectorSourceError(msg)
        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"{path} returned a non-JSON payload"
            raise SectorSourceError(msg) from exc
        records = _unwrap_listing(payload, origin=path)
        LOGGER.info(
            "Maintenance API listing fetched",
            extra={"path": path, "records": len(records), "latency_ms": latency_ms},
        )
        return records


class FixtureSectorSource:
    """Serve listings from JSON fixture files instead of the live API."""

    def __init__(self, equipment_path: Path, work_orders_path: Path) -> None:
        self._equipment_path = equipment_path
        self._work_orders_path = work_orders_path

    def list_equipment(self) -> List[Mapping[str, Any]]:
        """Return the equipment fixture records."""

        return self._read(self._equipment_path)

    def list_work_orders_summary(self) -> List[Mapping[str, Any]]:
        """Return the work-order fixture records."""

        return self._read(self._work_orders_path)

    @staticmethod
    def _read(path: Path) -> List[Mapping[str, Any]]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Unable to read fixture {path}"
            raise SectorSourceError(msg) from exc
        return _unwrap_listing(payload, origin=str(path))


def build_sector_source(config: AppConfig) -> SectorSource:
    """Return the collaborator selected by ``config.sources.provider``."""

    sources: SourcesConfig = config.sources
    if sources.provider == "fixtures":
        fixtures_dir = config.resolve_path(sources.fixtures_dir)
        return FixtureSectorSource(
            fixtures_dir / sources.equipment_fixture,
            fixtures_dir / sources.work_orders_fixture,
        )
    return EffortSectorSource(config.effort)


__all__ = [
    "EffortSectorSource",
    "FixtureSectorSource",
    "SectorSource",
    "SectorSourceError",
    "build_sector_source",
]
