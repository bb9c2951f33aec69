"""Configuration loader for the sector resolution backend."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

QueryValue = Union[str, int, bool, List[int], List[str]]


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class EffortAPIConfig(_FrozenModel):
    """Settings for the external maintenance-management API."""

    base_url: str = Field(..., min_length=1)
    timeout_seconds: float = Field(45.0, gt=0)
    auth_header: str = Field("X-API-KEY", min_length=1)
    equipment_path: str = Field(..., min_length=1)
    work_orders_path: str = Field(..., min_length=1)
    equipment_api_key_env: str = Field(..., min_length=1)
    work_orders_api_key_env: str = Field(..., min_length=1)
    equipment_params: Dict[str, QueryValue] = Field(default_factory=dict)
    work_order_params: Dict[str, QueryValue] = Field(default_factory=dict)

    @field_validator("equipment_path", "work_orders_path")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            msg = f"API paths must start with '/': {value}"
            raise ValueError(msg)
        return value


class SourcesConfig(_FrozenModel):
    """Selects where equipment and work-order listings are read from."""

    provider: Literal["effort", "fixtures"] = Field("effort")
    fixtures_dir: str = Field(..., min_length=1)
    equipment_fixture: str = Field("equipamentos.json", min_length=1)
    work_orders_fixture: str = Field("os_resumida.json", min_length=1)

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class CatalogConfig(_FrozenModel):
    """External sector catalog build settings."""

    concurrent_fetch: bool = False
    cache_ttl_seconds: int = Field(0, ge=0)


class ReconciliationConfig(_FrozenModel):
    """Fuzzy reconciliation settings."""

    overrides_path: Optional[str] = Field(default=None, min_length=1)
    log_ambiguous_matches: bool = True


class SectorMappingsConfig(_FrozenModel):
    """Persisted external-to-system sector mapping table settings."""

    database_url: str = Field(..., min_length=1)
    cache_ttl_seconds: int = Field(300, ge=0)


class StorageConfig(_FrozenModel):
    """Local record storage used by batch jobs."""

    records_path: str = Field(..., min_length=1)


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    effort: EffortAPIConfig
    sources: SourcesConfig
    catalog: CatalogConfig
    reconciliation: ReconciliationConfig
    sector_mappings: SectorMappingsConfig
    storage: StorageConfig

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return REPO_ROOT / "config.yaml"

    def resolve_path(self, value: str) -> Path:
        """Return ``value`` as an absolute path, relative to the repository root."""

        candidate = Path(value).expanduser()
        if candidate.is_absolute():
            return candidate
        return REPO_ROOT / candidate


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    override = os.getenv("SECTORS_ENV_FILE")
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _strip_inline_comment(value: str) -> str:
    """Remove inline comments from an environment value when unquoted."""

    comment_index = value.find("#")
    if comment_index == -1:
        return value
    return value[:comment_index].rstrip()


def _load_env_file(path: Path) -> None:
    """Populate ``os.environ`` with values read from a ``.env`` file."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.lower().startswith("export "):
                    line = line[7:].lstrip()
                if "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue
                existing_value = os.environ.get(key)
                if existing_value is not None and existing_value.strip() != "":
                    continue
                value = raw_value.strip()
                if not value:
                    os.environ[key] = ""
                    continue
                if value[0] in {'"', "'"} and value[-1] == value[0]:
                    os.environ[key] = value[1:-1]
                    continue
                os.environ[key] = _strip_inline_comment(value)
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)


def _env_flag(key: str) -> bool:
    """Return whether the environment variable ``key`` holds a truthy flag."""

    raw = os.getenv(key)
    if raw is None:
        return False
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    base_url = os.getenv("EFFORT_BASE_URL")
    if base_url and base_url.strip():
        effort_section = raw_content.setdefault("effort", {})
        effort_section["base_url"] = base_url.strip()
        LOGGER.info("Maintenance API base URL overridden from environment")

    if _env_flag("USE_MOCK"):
        sources_section = raw_content.setdefault("sources", {})
        sources_section["provider"] = "fixtures"
        LOGGER.info("USE_MOCK set; reading sector sources from fixtures")
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
