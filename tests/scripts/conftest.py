from __future__ import annotations

import pytest

from backend.app.config import load_config


@pytest.fixture()
def fixture_config(monkeypatch, tmp_path):
    """Load configuration with listings served from the bundled fixtures."""

    load_config.cache_clear()
    monkeypatch.setenv("SECTORS_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.delenv("EFFORT_BASE_URL", raising=False)
    monkeypatch.setenv("USE_MOCK", "1")
    yield load_config()
    load_config.cache_clear()
