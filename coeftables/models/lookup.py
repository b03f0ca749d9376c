from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .categories import Converter

"""Value objects shared by the composite key table and its consumers."""

__all__ = [
    "KeyDimension",
    "Record",
    "LookupMiss",
    "LookupResult",
]


@dataclass(frozen=True)
class KeyDimension:
    """One categorical axis of a table: a display name and its decoder."""
    name: str
    convert: Converter

    def decode(self, text: str) -> Any:
        return self.convert(text)


@dataclass(frozen=True)
class Record:
    """One decoded cell of a coefficient table.

    Attributes:
        dimensions: decoded header values of the cell's column, in header order
        identifier: decoded label from column 0 of the cell's row
        value: parsed cell value (table default when the cell was blank)
        row: 1-based logical row of the cell in the source
        column: 0-based column of the cell in the source
    """
    dimensions: tuple[Any, ...]
    identifier: Any
    value: float
    row: int
    column: int

    @property
    def key(self) -> tuple[Any, ...]:
        return (*self.dimensions, self.identifier)


def _label(value: Any) -> str:
    # Enum members print as their value, everything else as-is
    return str(getattr(value, "value", value))


@dataclass(frozen=True)
class LookupMiss:
    """Structured attribution of a failed lookup.

    ``component`` names the key component most likely wrong, ``value`` is the
    offending value the caller passed for it.
    """
    table: str
    component: str
    value: Any
    key: tuple[Any, ...]

    def describe(self) -> str:
        return (
            f"{self.table}: unable to find {self.component}={_label(self.value)} "
            f"in the available data, returning no value"
        )

    def to_json_line(self) -> str:
        return json.dumps(
            {
                "table": self.table,
                "component": self.component,
                "value": _label(self.value),
                "key": [_label(k) for k in self.key],
            },
            ensure_ascii=False,
        )


@dataclass(frozen=True)
class LookupResult:
    """Outcome of ``CompositeKeyTable.find``: either a record or a miss."""
    record: Record | None = None
    miss: LookupMiss | None = None

    @property
    def found(self) -> bool:
        return self.record is not None

    @property
    def value(self) -> float | None:
        return None if self.record is None else self.record.value
