"""CSV-backed coefficient tables with composite key lookups."""

from .config.loader import CatalogConfig, ConfigError, TableConfig, load_config
from .errors import CoefficientTableError
from .models.categories import UnknownCategoryValueError
from .models.lookup import KeyDimension, LookupMiss, LookupResult, Record
from .services.catalog import TableCatalog, load_table
from .table.composite import CompositeKeyTable, TableFormatError
from .tabular.reader import SourceUnavailableError, TabularReaderError, TabularRecordReader

__all__ = [
    "CatalogConfig",
    "CoefficientTableError",
    "CompositeKeyTable",
    "ConfigError",
    "KeyDimension",
    "LookupMiss",
    "LookupResult",
    "Record",
    "SourceUnavailableError",
    "TableCatalog",
    "TableConfig",
    "TableFormatError",
    "TabularReaderError",
    "TabularRecordReader",
    "UnknownCategoryValueError",
    "load_config",
    "load_table",
]
