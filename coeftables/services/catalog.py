from __future__ import annotations

from pathlib import Path

from ..config.loader import CatalogConfig, ConfigError, TableConfig, load_config, resolve_config_path
from ..logging.init import get_logger, log_summary
from ..models.categories import get_converter
from ..models.lookup import KeyDimension
from ..table.composite import CompositeKeyTable
from ..tabular.reader import TabularRecordReader

"""Table catalog service.

Builds CompositeKeyTable instances from catalog configuration. A catalog
owns the tables it has built; there is no module-level cache, so two
catalogs never share state.
"""

__all__ = [
    "TableCatalog",
    "load_table",
]


def _dimension(name: str) -> KeyDimension:
    return KeyDimension(name=name, convert=get_converter(name))


def load_table(table_config: TableConfig, resource_directory: Path) -> CompositeKeyTable:
    """Read one configured table from disk and build its index.

    Raises:
        SourceUnavailableError: the resource file cannot be opened
        TableFormatError / UnknownCategoryValueError: the file content is invalid
    """
    path = resource_directory / table_config.resource
    logger = get_logger()
    logger.debug(f"loading table {table_config.name} from {path}")
    reader = TabularRecordReader(path, encoding=table_config.encoding)
    table = CompositeKeyTable.from_reader(
        reader,
        [_dimension(d) for d in table_config.dimensions],
        _dimension(table_config.identifier),
        name=table_config.name,
        default_value=table_config.default_value,
        relaxation_order=table_config.relaxation_order,
    )
    log_summary(
        f"table={table.name} rows={reader.row_index} "
        f"columns={len(table.header_index)} records={len(table)}"
    )
    return table


class TableCatalog:
    """Loads configured tables on first request and keeps them for its lifetime."""

    def __init__(self, config: CatalogConfig) -> None:
        self.config = config
        self._tables: dict[str, CompositeKeyTable] = {}

    @classmethod
    def from_path(cls, path: Path | None = None) -> TableCatalog:
        return cls(load_config(path if path is not None else resolve_config_path()))

    @property
    def names(self) -> list[str]:
        return sorted(self.config.tables)

    def get(self, name: str) -> CompositeKeyTable:
        table = self._tables.get(name)
        if table is None:
            try:
                table_config = self.config.tables[name]
            except KeyError:
                raise ConfigError(f"table not configured: {name}") from None
            table = load_table(table_config, self.config.resource_directory)
            self._tables[name] = table
        return table

    def load_all(self) -> dict[str, CompositeKeyTable]:
        return {name: self.get(name) for name in self.names}
