from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..errors import CoefficientTableError
from ..models.categories import UnknownCategoryValueError
from ..models.lookup import KeyDimension, LookupMiss, LookupResult, Record
from ..tabular.reader import TabularRecordReader

if TYPE_CHECKING:
    import pandas as pd

"""Composite key lookup table built from a column-aligned CSV layout.

Layout:
- rows 1..k: one header row per key dimension, column 0 holds a label and is ignored
- rows k+1..: data rows, column 0 is the row identifier, columns 1..N are values

Each (data row, column) cell becomes one Record keyed by
(dimension_1, ..., dimension_k, identifier). The table is built once and
exposes no mutator.

A lookup miss is attributed to one key component by relaxation: each
component in ``relaxation_order`` is dropped in turn and the remaining
components are matched against the table. The first relaxation that matches
names the culprit; when none matches, the last component in the order is
blamed. Attribution never produces a value.
"""

__all__ = [
    "TableFormatError",
    "CompositeKeyTable",
    "parse_cell",
    "DEFAULT_CELL_VALUE",
]

logger = logging.getLogger(__name__)

DEFAULT_CELL_VALUE = 0.0

# Invariant decimal convention: '.' decimal point, optional ',' thousands groups
_NUMBER_RE = re.compile(r"^[+-]?(?:\d{1,3}(?:,\d{3})+|\d*)(?:\.\d*)?(?:[eE][+-]?\d+)?$")


class TableFormatError(CoefficientTableError):
    """Raised when the source layout cannot be turned into a table."""


def parse_cell(text: str, default: float = DEFAULT_CELL_VALUE) -> float:
    """Parse a data cell. Blank text yields ``default``.

    Raises:
        ValueError: non-blank text that is not an invariant decimal number
    """
    stripped = text.strip()
    if stripped == "":
        return default
    mantissa = re.split(r"[eE]", stripped, maxsplit=1)[0]
    if not _NUMBER_RE.match(stripped) or not any(ch.isdigit() for ch in mantissa):
        raise ValueError(f"not a number: {text!r}")
    return float(stripped.replace(",", ""))


def _decode(dimension: KeyDimension, text: str, *, row: int, column: int) -> Any:
    try:
        return dimension.decode(text)
    except (ValueError, KeyError) as e:
        category = e.category if isinstance(e, UnknownCategoryValueError) else dimension.name
        raise UnknownCategoryValueError(
            text, category, dimension=dimension.name, row=row, column=column
        ) from e


class CompositeKeyTable:
    """Immutable index from composite keys to decoded cell records."""

    def __init__(
        self,
        records: Iterable[Record],
        dimensions: Sequence[KeyDimension],
        identifier: KeyDimension,
        *,
        name: str = "table",
        header_index: dict[int, tuple[str, ...]] | None = None,
        default_value: float = DEFAULT_CELL_VALUE,
        relaxation_order: Sequence[str] | None = None,
    ) -> None:
        if not dimensions:
            raise ValueError("a table needs at least one key dimension")
        self._name = name
        self._dimensions = tuple(dimensions)
        self._identifier = identifier
        self._default_value = default_value
        self._header_index = MappingProxyType(dict(header_index or {}))

        names = [d.name for d in self._dimensions] + [identifier.name]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate key component names: {names}")
        self._component_names = tuple(names)
        self._positions = {n: i for i, n in enumerate(names)}

        order = tuple(relaxation_order) if relaxation_order else (names[-1], *names[:-1])
        unknown = [n for n in order if n not in self._positions]
        if unknown or len(set(order)) != len(order):
            raise ValueError(f"invalid relaxation order {list(order)} for components {names}")
        self._relaxation_order = order

        index: dict[tuple[Any, ...], Record] = {}
        kept: list[Record] = []
        for rec in records:
            if rec.key in index:
                first = index[rec.key]
                logger.warning(
                    f"{name}: duplicate key {rec.key} at row={rec.row} column={rec.column}, "
                    f"keeping row={first.row} column={first.column}"
                )
                continue
            index[rec.key] = rec
            kept.append(rec)
        self._records = tuple(kept)
        self._index = MappingProxyType(index)

        # One set of partial keys per relaxable component, position dropped
        self._relaxed = MappingProxyType({
            n: frozenset(k[:self._positions[n]] + k[self._positions[n] + 1:] for k in index)
            for n in order
        })

    # ------------------------------------------------------------------ build
    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Sequence[str]],
        dimensions: Sequence[KeyDimension],
        identifier: KeyDimension,
        *,
        name: str = "table",
        default_value: float = DEFAULT_CELL_VALUE,
        relaxation_order: Sequence[str] | None = None,
    ) -> CompositeKeyTable:
        """Build a table from parsed rows.

        Steps:
        1. Read one header row per dimension (fewer rows -> TableFormatError)
        2. Decode every header column (unknown value -> UnknownCategoryValueError)
        3. For each non-blank data row decode column 0 and parse columns 1..N
        """
        if not dimensions:
            raise ValueError("a table needs at least one key dimension")
        it = iter(rows)
        header_rows: list[Sequence[str]] = []
        for dim in dimensions:
            try:
                header_rows.append(next(it))
            except StopIteration:
                raise TableFormatError(
                    f"{name}: missing header row for dimension '{dim.name}' "
                    f"(expected {len(dimensions)} header rows, got {len(header_rows)})"
                ) from None

        width = len(header_rows[0])
        for i, header in enumerate(header_rows):
            if len(header) < width:
                raise TableFormatError(
                    f"{name}: header row {i + 1} has {len(header)} columns, expected {width}"
                )
            if len(header) > width:
                logger.warning(
                    f"{name}: header row {i + 1} has {len(header)} columns, "
                    f"ignoring cells beyond column {width - 1}"
                )

        header_index = {
            col: tuple(header[col] for header in header_rows) for col in range(1, width)
        }
        column_keys = {
            col: tuple(
                _decode(dim, raw[i], row=i + 1, column=col) for i, dim in enumerate(dimensions)
            )
            for col, raw in header_index.items()
        }

        records: list[Record] = []
        for row_number, fields in enumerate(it, start=len(header_rows) + 1):
            if all(not f.strip() for f in fields):
                continue
            if len(fields) > width:
                logger.warning(
                    f"{name}: row {row_number} has {len(fields)} columns, "
                    f"ignoring cells beyond column {width - 1}"
                )
            ident = _decode(identifier, fields[0], row=row_number, column=0)
            for col in range(1, width):
                text = fields[col] if col < len(fields) else ""
                try:
                    value = parse_cell(text, default_value)
                except ValueError as e:
                    raise TableFormatError(f"{name}: row {row_number} column {col}: {e}") from e
                records.append(
                    Record(dimensions=column_keys[col], identifier=ident, value=value,
                           row=row_number, column=col)
                )

        logger.debug(f"{name}: built {len(records)} records from {width - 1} columns")
        return cls(
            records,
            dimensions,
            identifier,
            name=name,
            header_index=header_index,
            default_value=default_value,
            relaxation_order=relaxation_order,
        )

    @classmethod
    def from_reader(
        cls,
        reader: TabularRecordReader,
        dimensions: Sequence[KeyDimension],
        identifier: KeyDimension,
        *,
        name: str | None = None,
        default_value: float = DEFAULT_CELL_VALUE,
        relaxation_order: Sequence[str] | None = None,
    ) -> CompositeKeyTable:
        """Consume ``reader`` and build a table. The reader is closed afterwards."""
        with reader:
            return cls.from_rows(
                reader,
                dimensions,
                identifier,
                name=name or reader.name,
                default_value=default_value,
                relaxation_order=relaxation_order,
            )

    # ------------------------------------------------------------- properties
    @property
    def name(self) -> str:
        return self._name

    @property
    def dimensions(self) -> tuple[KeyDimension, ...]:
        return self._dimensions

    @property
    def identifier(self) -> KeyDimension:
        return self._identifier

    @property
    def component_names(self) -> tuple[str, ...]:
        return self._component_names

    @property
    def relaxation_order(self) -> tuple[str, ...]:
        return self._relaxation_order

    @property
    def default_value(self) -> float:
        return self._default_value

    @property
    def header_index(self) -> MappingProxyType[int, tuple[str, ...]]:
        return self._header_index

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, tuple) and key in self._index

    def keys(self) -> Iterator[tuple[Any, ...]]:
        return iter(self._index.keys())

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return (
            f"CompositeKeyTable(name={self._name!r}, components={list(self._component_names)}, "
            f"records={len(self._records)})"
        )

    # ----------------------------------------------------------------- lookup
    def find(self, *key: Any) -> LookupResult:
        """Resolve ``key`` = (dimension values..., identifier).

        A hit returns the record. A miss returns a LookupMiss naming the
        component most likely wrong and writes one WARN entry.
        """
        if len(key) != len(self._component_names):
            raise ValueError(
                f"{self._name}: expected {len(self._component_names)} key components "
                f"{list(self._component_names)}, got {len(key)}"
            )
        record = self._index.get(key)
        if record is not None:
            return LookupResult(record=record)

        component = self._attribute_miss(key)
        miss = LookupMiss(
            table=self._name,
            component=component,
            value=key[self._positions[component]],
            key=key,
        )
        logger.warning(miss.describe())
        return LookupResult(miss=miss)

    def lookup(self, *key: Any) -> Record | None:
        """Return the record for ``key`` or None when there is no such cell."""
        return self.find(*key).record

    def value(self, *key: Any, default: float | None = None) -> float | None:
        record = self.find(*key).record
        return default if record is None else record.value

    def _attribute_miss(self, key: tuple[Any, ...]) -> str:
        for component in self._relaxation_order:
            pos = self._positions[component]
            if key[:pos] + key[pos + 1:] in self._relaxed[component]:
                return component
        return self._relaxation_order[-1]

    # ------------------------------------------------------------- inspection
    def to_frame(self) -> pd.DataFrame:
        """Long-format DataFrame, one row per record, for inspection."""
        import pandas as pd

        columns = [*self._component_names, "value", "row", "column"]
        data = [
            [*rec.key, rec.value, rec.row, rec.column]
            for rec in self._records
        ]
        return pd.DataFrame(data, columns=columns)
