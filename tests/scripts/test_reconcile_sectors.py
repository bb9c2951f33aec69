"""Tests for the reconciliation report utility."""

from __future__ import annotations

import json

import pytest

from scripts.reconcile_sectors import load_records, main


def test_load_records_accepts_list_and_mapping(tmp_path) -> None:
    as_list = tmp_path / "list.json"
    as_list.write_text(json.dumps([{"setor": "CME"}, "noise"]), encoding="utf-8")
    assert load_records(as_list) == [{"setor": "CME"}]

    as_mapping = tmp_path / "mapping.json"
    as_mapping.write_text(json.dumps({"inv-1": {"setor": "CDC"}}), encoding="utf-8")
    assert load_records(as_mapping) == [{"setor": "CDC"}]


def test_load_records_rejects_scalars(tmp_path) -> None:
    path = tmp_path / "scalar.json"
    path.write_text("42", encoding="utf-8")
    with pytest.raises(ValueError):
        load_records(path)


def test_main_prints_report(fixture_config, tmp_path, capsys) -> None:
    records = tmp_path / "records.json"
    records.write_text(
        json.dumps(
            [
                {"setor": "CDC - Centro de Diagnóstico"},
                {"setor": "Radiologia"},
                {"setor": "radiologia"},
                {"setor": ""},
            ]
        ),
        encoding="utf-8",
    )
    assert main([str(records)]) == 0
    printed = capsys.readouterr().out
    assert "Mapped sectors (2):" in printed
    assert "  - CDC - Centro de Diagnóstico → 7 (override_partial)" in printed
    assert "  - Radiologia → 6 (catalog_exact)" in printed
    assert "External catalog entries (11):" in printed


def test_main_reports_unreadable_file(fixture_config, tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "Unable to read records" in capsys.readouterr().err
