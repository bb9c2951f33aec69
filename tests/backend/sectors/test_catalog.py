from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional

import pytest

from backend.app.sectors.catalog import (
    CachedCatalogProvider,
    ExternalCatalogBuilder,
    catalog_entries,
    merge_into_catalog,
)
from backend.app.sectors.hashing import hash_sector_id
from backend.app.sectors.sources import SectorSourceError


class StubSource:
    """In-memory source returning fixed listings or raising configured errors."""

    def __init__(
        self,
        equipment: Optional[List[Mapping[str, Any]]] = None,
        work_orders: Optional[List[Mapping[str, Any]]] = None,
        *,
        equipment_error: Optional[Exception] = None,
        work_orders_error: Optional[Exception] = None,
    ) -> None:
        self.equipment = equipment or []
        self.work_orders = work_orders or []
        self.equipment_error = equipment_error
        self.work_orders_error = work_orders_error
        self.calls: Dict[str, int] = {"equipment": 0, "work_orders": 0}
        self._lock = threading.Lock()

    def list_equipment(self) -> List[Mapping[str, Any]]:
        with self._lock:
            self.calls["equipment"] += 1
        if self.equipment_error is not None:
            raise self.equipment_error
        return self.equipment

    def list_work_orders_summary(self) -> List[Mapping[str, Any]]:
        with self._lock:
            self.calls["work_orders"] += 1
        if self.work_orders_error is not None:
            raise self.work_orders_error
        return self.work_orders


EQUIPMENT = [
    {"Setor": "Laboratório", "SetorId": 40},
    {"Setor": "UTI 1", "SetorId": 1},
    {"Setor": "   "},
    {"Tag": "SEM-SETOR"},
]
WORK_ORDERS = [
    {"Setor": "laboratório ", "SetorId": 41},
    {"Setor": "Farmácia"},
    {"Setor": "Farmácia", "SetorId": 90},
]


def test_merge_into_catalog_keeps_first_id() -> None:
    catalog: Dict[str, int] = {}
    assert merge_into_catalog(catalog, EQUIPMENT) == 2
    assert merge_into_catalog(catalog, WORK_ORDERS) == 1
    assert catalog == {
        "LABORATÓRIO": 40,
        "UTI 1": 1,
        "FARMÁCIA": hash_sector_id("FARMÁCIA"),
    }


@pytest.mark.parametrize("concurrent", [False, True])
def test_builder_merges_equipment_before_work_orders(concurrent: bool) -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS)
    catalog = ExternalCatalogBuilder(source, concurrent=concurrent).build()
    assert catalog_entries(catalog) == [
        ("LABORATÓRIO", 40),
        ("UTI 1", 1),
        ("FARMÁCIA", hash_sector_id("FARMÁCIA")),
    ]
    assert source.calls == {"equipment": 1, "work_orders": 1}


@pytest.mark.parametrize("concurrent", [False, True])
def test_builder_tolerates_failing_equipment_listing(concurrent: bool) -> None:
    source = StubSource(
        EQUIPMENT,
        WORK_ORDERS,
        equipment_error=SectorSourceError("equipment unavailable"),
    )
    catalog = ExternalCatalogBuilder(source, concurrent=concurrent).build()
    assert catalog == {"LABORATÓRIO": 41, "FARMÁCIA": hash_sector_id("FARMÁCIA")}


def test_builder_tolerates_failing_work_order_listing() -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS, work_orders_error=RuntimeError("boom"))
    catalog = ExternalCatalogBuilder(source).build()
    assert catalog == {"LABORATÓRIO": 40, "UTI 1": 1}


def test_builder_returns_empty_catalog_when_both_listings_fail(caplog) -> None:
    source = StubSource(
        equipment_error=SectorSourceError("down"),
        work_orders_error=SectorSourceError("down"),
    )
    assert ExternalCatalogBuilder(source).build() == {}
    assert any("Failed to list" in message for message in caplog.messages)


def test_builder_rebuilds_on_every_call() -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS)
    builder = ExternalCatalogBuilder(source)
    builder.build()
    source.equipment = [{"Setor": "Laboratório", "SetorId": 44}]
    assert builder.build()["LABORATÓRIO"] == 44
    assert source.calls["equipment"] == 2


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_cached_provider_reuses_catalog_until_expiry() -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS)
    clock = FakeClock()
    provider = CachedCatalogProvider(
        ExternalCatalogBuilder(source), ttl_seconds=60, clock=clock
    )
    first = provider.get()
    clock.now = 30
    second = provider.get()
    assert first == second
    assert source.calls["equipment"] == 1

    clock.now = 61
    provider.get()
    assert source.calls["equipment"] == 2


def test_cached_provider_returns_copies_and_invalidates() -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS)
    provider = CachedCatalogProvider(
        ExternalCatalogBuilder(source), ttl_seconds=60, clock=FakeClock()
    )
    catalog = provider.get()
    catalog["INJECTED"] = 999
    assert "INJECTED" not in provider.get()

    provider.invalidate()
    provider.get()
    assert source.calls["equipment"] == 2


def test_cached_provider_with_zero_ttl_always_rebuilds() -> None:
    source = StubSource(EQUIPMENT, WORK_ORDERS)
    provider = CachedCatalogProvider(
        ExternalCatalogBuilder(source), ttl_seconds=0, clock=FakeClock()
    )
    provider.get()
    provider.get()
    assert source.calls["equipment"] == 2


def test_builder_skips_malformed_ids_instead_of_failing() -> None:
    source = StubSource(
        [{"Setor": "UTI 9", "SetorId": "²"}, {"Setor": "CME", "SetorId": 5}],
        [{"Setor": "Farmácia", "SetorId": 43}],
    )
    catalog = ExternalCatalogBuilder(source).build()
    assert catalog == {
        "UTI 9": hash_sector_id("UTI 9"),
        "CME": 5,
        "FARMÁCIA": 43,
    }


class SlowEquipmentSource(StubSource):
    """Equipment listing that only returns after the work orders were delivered."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.work_orders_delivered = threading.Event()

    def list_equipment(self) -> List[Mapping[str, Any]]:
        assert self.work_orders_delivered.wait(timeout=5)
        return super().list_equipment()

    def list_work_orders_summary(self) -> List[Mapping[str, Any]]:
        records = super().list_work_orders_summary()
        self.work_orders_delivered.set()
        return records


def test_concurrent_build_merges_equipment_first_regardless_of_arrival() -> None:
    source = SlowEquipmentSource(
        [{"Setor": "Laboratório", "SetorId": 40}],
        [{"Setor": "Laboratório", "SetorId": 41}, {"Setor": "CME", "SetorId": 5}],
    )
    catalog = ExternalCatalogBuilder(source, concurrent=True).build()
    assert catalog_entries(catalog) == [("LABORATÓRIO", 40), ("CME", 5)]
