from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..models.categories import CONVERTERS

"""Table catalog configuration loader.

Responsibilities:
- Load the YAML catalog (bundled ``resources/tables.yml`` unless overridden)
- Validate it against ``tables_schema.json``
- Check dimension / identifier names against the converter registry
- Apply defaults (default_value=0.0, encoding=utf-8-sig, resource_directory=config dir)
"""

__all__ = [
    "ConfigError",
    "TableConfig",
    "CatalogConfig",
    "load_config",
    "resolve_config_path",
    "DEFAULT_CONFIG_PATH",
    "CONFIG_ENV",
]

_package_root = Path(__file__).parent.parent
SCHEMA_PATH = Path(__file__).parent / "tables_schema.json"
DEFAULT_CONFIG_PATH = _package_root / "resources" / "tables.yml"
CONFIG_ENV = "COEFTABLES_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class TableConfig:
    name: str
    resource: str
    dimensions: tuple[str, ...]
    identifier: str
    default_value: float = 0.0
    relaxation_order: tuple[str, ...] | None = None
    encoding: str = "utf-8-sig"

    @property
    def component_names(self) -> tuple[str, ...]:
        return (*self.dimensions, self.identifier)


@dataclass(frozen=True)
class CatalogConfig:
    resource_directory: Path  # absolute, resolved against the config file location
    tables: dict[str, TableConfig]

    def resource_path(self, table: TableConfig) -> Path:
        return self.resource_directory / table.resource


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or invalid, or the data
            fails validation (missing keys, wrong types, extra keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _table_config(name: str, raw: dict[str, Any]) -> TableConfig:
    dimensions = tuple(raw["dimensions"])
    identifier = raw["identifier"]
    components = (*dimensions, identifier)
    if identifier in dimensions:
        raise ConfigError(f"table '{name}': identifier '{identifier}' is also a dimension")
    for component in components:
        if component not in CONVERTERS:
            raise ConfigError(f"table '{name}': no converter registered for '{component}'")
    order = raw.get("relaxation_order")
    if order is not None:
        unknown = [c for c in order if c not in components]
        if unknown:
            raise ConfigError(f"table '{name}': relaxation_order names unknown components {unknown}")
    return TableConfig(
        name=name,
        resource=raw["resource"],
        dimensions=dimensions,
        identifier=identifier,
        default_value=float(raw.get("default_value", 0.0)),
        relaxation_order=tuple(order) if order is not None else None,
        encoding=raw.get("encoding", "utf-8-sig"),
    )


def load_config(path: Path) -> CatalogConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    base = path.resolve().parent
    resource_dir = Path(data.get("resource_directory", "."))
    if not resource_dir.is_absolute():
        resource_dir = (base / resource_dir).resolve()

    tables = {name: _table_config(name, raw) for name, raw in data["tables"].items()}
    return CatalogConfig(resource_directory=resource_dir, tables=tables)


def resolve_config_path(env_file: Path | None = None) -> Path:
    """Return the catalog path to use.

    A ``.env`` file (current directory unless ``env_file`` is given) is loaded
    first without overriding variables already set; ``COEFTABLES_CONFIG``
    then wins over the bundled catalog.
    """
    env_path = env_file if env_file is not None else Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
    override = os.getenv(CONFIG_ENV)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH
