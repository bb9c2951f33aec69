from __future__ import annotations

from typing import Any, List, Mapping

import pytest

from backend.app.config import load_config
from backend.app.sectors.hashing import hash_sector_id
from backend.app.sectors.reconciliation import MatchSource
from backend.app.sectors.service import SECTOR_ID_FIELD, SectorIdentityService


class CountingSource:
    def __init__(self) -> None:
        self.equipment_calls = 0
        self.equipment: List[Mapping[str, Any]] = [
            {"Setor": "Laboratório Central", "SetorId": 42},
            {"Setor": "UTI 1", "SetorId": 1},
        ]

    def list_equipment(self) -> List[Mapping[str, Any]]:
        self.equipment_calls += 1
        return self.equipment

    def list_work_orders_summary(self) -> List[Mapping[str, Any]]:
        return [{"Setor": "Farmácia", "SetorId": 43}]


@pytest.fixture()
def config(monkeypatch, tmp_path):
    load_config.cache_clear()
    monkeypatch.setenv("SECTORS_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.delenv("USE_MOCK", raising=False)
    monkeypatch.delenv("EFFORT_BASE_URL", raising=False)
    try:
        yield load_config()
    finally:
        load_config.cache_clear()


def test_resolve_delegates_to_resolver() -> None:
    service = SectorIdentityService()
    assert service.resolve("Emergência") == 4
    assert service.resolve("") is None
    assert service.resolve_from_item({"Setor": "Emergência", "SetorId": 40}) == 40


def test_reconcile_builds_catalog_when_not_supplied(config) -> None:
    source = CountingSource()
    service = SectorIdentityService.from_config(config, source=source)
    assert service.reconcile("laboratório central") == 42
    assert service.reconcile("Laboratório", {"LABORATÓRIO SUL": 51}) == 51
    assert source.equipment_calls == 1


def test_reconcile_blank_name_skips_catalog(config) -> None:
    source = CountingSource()
    service = SectorIdentityService.from_config(config, source=source)
    assert service.reconcile("   ") is None
    assert service.reconcile(None) is None
    assert source.equipment_calls == 0


def test_reconcile_all_reports_mapped_names(config) -> None:
    service = SectorIdentityService.from_config(config, source=CountingSource())
    report = service.reconcile_all(
        [{"setor": "Farmácia"}, {"setor": "farmácia"}, {"setor": "Setor Novo"}]
    )
    assert [(entry.name, entry.sector_id, entry.source) for entry in report.mapped] == [
        ("Farmácia", 43, MatchSource.CATALOG_EXACT),
        ("Setor Novo", hash_sector_id("SETOR NOVO"), MatchSource.FALLBACK),
    ]
    assert [entry.name for entry in report.all_catalog_entries] == [
        "LABORATÓRIO CENTRAL",
        "UTI 1",
        "FARMÁCIA",
    ]


def test_annotate_records_sets_sector_ids(config) -> None:
    source = CountingSource()
    service = SectorIdentityService.from_config(config, source=source)
    records = [
        {"id": "inv-1", "setor": "CDC - Centro de Diagnóstico", "sectorId": 300},
        {"id": "inv-2", "setor": "Farmácia"},
        {"id": "inv-3"},
    ]
    annotated = service.annotate_records(records)
    assert [record[SECTOR_ID_FIELD] for record in annotated] == [7, 43, None]
    assert records[0][SECTOR_ID_FIELD] == 300
    assert source.equipment_calls == 1


def test_cached_catalog_is_reused_and_invalidated() -> None:
    source = CountingSource()
    service = SectorIdentityService.from_source(source, cache_ttl_seconds=60)
    service.build_catalog()
    service.build_catalog()
    assert source.equipment_calls == 1
    service.invalidate_catalog()
    service.build_catalog()
    assert source.equipment_calls == 2


def test_from_config_loads_override_file(config, tmp_path) -> None:
    overrides = tmp_path / "overrides.yaml"
    overrides.write_text("Laboratório: 12\n", encoding="utf-8")
    custom = config.model_copy(
        update={
            "reconciliation": config.reconciliation.model_copy(
                update={"overrides_path": str(overrides)}
            )
        }
    )
    service = SectorIdentityService.from_config(custom, source=CountingSource())
    assert service.reconcile("Laboratório Central") == 12
    assert service.reconcile("Pediatria") == 10


def test_name_helpers() -> None:
    assert SectorIdentityService.sector_id_to_name(5) == "Centro Cirúrgico"
    assert SectorIdentityService.sector_ids_to_names([5, 999]) == ["Centro Cirúrgico"]
