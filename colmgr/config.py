"""Configuration management."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import msgspec
import yaml


class ColmgrConfig(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Settings for stores, query backends, paging and namespace access."""

    store: Literal["sqlite", "memory"] = "sqlite"
    data_dir: str | None = None
    query_backend: Literal["local", "sparql"] = "local"
    sparql_endpoint: str | None = None
    sparql_timeout: float = 30.0
    page_size: int = 12
    max_page_size: int = 100
    restrict_namespaces: bool = False
    allowed_namespaces: list[str] = msgspec.field(default_factory=list)

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.max_page_size < self.page_size:
            raise ValueError(
                f"max_page_size ({self.max_page_size}) is below "
                f"page_size ({self.page_size})"
            )
        if self.query_backend == "sparql" and not self.sparql_endpoint:
            raise ValueError("sparql_endpoint is required for the sparql backend")

    def storage_path(self) -> Path:
        """Directory for local data."""
        if self.data_dir:
            return Path(self.data_dir)

        xdg_data_home = Path(
            os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        )
        return xdg_data_home / "colmgr"


class Config:
    """Loading and merging of configuration sources."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        return [
            xdg_config_home / "colmgr" / "config.yaml",
            Path(".colmgr.yaml"),
            Path("colmgr.yaml"),
        ]

    @staticmethod
    def from_environment() -> dict[str, Any]:
        """Read overrides from ``COLMGR_*`` environment variables."""
        overrides: dict[str, Any] = {}
        if store := os.environ.get("COLMGR_STORE"):
            overrides["store"] = store
        if data_dir := os.environ.get("COLMGR_DATA_DIR"):
            overrides["data_dir"] = data_dir
        if backend := os.environ.get("COLMGR_QUERY_BACKEND"):
            overrides["query_backend"] = backend
        if endpoint := os.environ.get("COLMGR_SPARQL_ENDPOINT"):
            overrides["sparql_endpoint"] = endpoint
        if page_size := os.environ.get("COLMGR_PAGE_SIZE"):
            try:
                overrides["page_size"] = int(page_size)
            except ValueError:
                raise ValueError(f"COLMGR_PAGE_SIZE must be an integer: {page_size!r}")
        if restrict := os.environ.get("COLMGR_RESTRICT_NAMESPACES"):
            overrides["restrict_namespaces"] = restrict.lower() in ("1", "true", "yes")
        if allowed := os.environ.get("COLMGR_ALLOWED_NAMESPACES"):
            overrides["allowed_namespaces"] = [
                ns.strip() for ns in allowed.split(",") if ns.strip()
            ]
        return overrides

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result

    @staticmethod
    def build(data: dict[str, Any]) -> ColmgrConfig:
        """Validate merged settings into a config struct."""
        try:
            return msgspec.convert(data, ColmgrConfig)
        except msgspec.ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}")


def load_config(path: Path | None = None) -> ColmgrConfig:
    """Load configuration from files and environment variables.

    Default paths are read in order, then the explicit file, then the
    environment; later sources win.
    """
    config: dict[str, Any] = {}

    for default_path in Config.get_config_paths():
        if default_path.exists():
            config = Config.merge_configs(config, Config.from_file(default_path))

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    return Config.build(Config.merge_configs(config, Config.from_environment()))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
