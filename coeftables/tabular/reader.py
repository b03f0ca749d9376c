from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from ..errors import CoefficientTableError

"""Line-oriented CSV reader for bundled coefficient tables.

Input dialect is fixed: comma delimiter, double-quote quoting, a literal quote
inside a quoted field is written as two quotes, and a quoted field may span
several physical lines.

Parsing is an explicit scanner with two states (unquoted / quoted) toggled on
every quote character. A comma splits fields only in the unquoted state, and a
logical line is complete once its quote count is even.
"""

__all__ = [
    "TabularReaderError",
    "SourceUnavailableError",
    "TabularRecordReader",
    "has_open_quote",
    "scan_quotes",
    "split_fields",
    "unescape_field",
    "parse_line",
]

logger = logging.getLogger(__name__)

QUOTE = '"'
DELIMITER = ","


class TabularReaderError(CoefficientTableError):
    """Raised when the reader is used in an invalid state or the source cannot be decoded."""


class SourceUnavailableError(TabularReaderError):
    """Raised when the underlying source cannot be opened for reading."""


def scan_quotes(segment: str, in_quotes: bool = False) -> bool:
    """Return the quote state after scanning ``segment`` from ``in_quotes``."""
    for ch in segment:
        if ch == QUOTE:
            in_quotes = not in_quotes
    return in_quotes


def has_open_quote(line: str) -> bool:
    """Return True if ``line`` ends inside a quoted region (odd quote count)."""
    return scan_quotes(line)


def split_fields(line: str) -> list[str]:
    """Split a logical line on commas outside quoted regions.

    Fields are returned raw (quotes kept); see ``unescape_field``.
    """
    fields: list[str] = []
    in_quotes = False
    start = 0
    for pos, ch in enumerate(line):
        if ch == QUOTE:
            in_quotes = not in_quotes
        elif ch == DELIMITER and not in_quotes:
            fields.append(line[start:pos])
            start = pos + 1
    fields.append(line[start:])
    return fields


def unescape_field(field: str) -> str:
    """Strip one level of surrounding quotes and collapse doubled quotes."""
    if len(field) >= 2 and field[0] == QUOTE and field[-1] == QUOTE:
        field = field[1:-1]
    return field.replace(QUOTE * 2, QUOTE)


def parse_line(line: str) -> list[str]:
    return [unescape_field(f) for f in split_fields(line)]


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class TabularRecordReader:
    """Forward-only reader producing one list of fields per logical row.

    The reader owns its stream: a path is opened at construction, an already
    open stream is adopted. Either way it is closed when iteration ends, when
    iteration is abandoned, or when ``close()`` is called.

    Usage::

        with TabularRecordReader(path) as reader:
            for row in reader:
                ...
    """

    def __init__(self, source: Path | str | TextIO, *, encoding: str = "utf-8-sig") -> None:
        self._name: str
        self._stream: TextIO | None
        if isinstance(source, (str, Path)):
            path = Path(source)
            self._name = str(path)
            try:
                self._stream = path.open("r", encoding=encoding)
            except OSError as e:
                raise SourceUnavailableError(f"cannot open source {path}: {e}") from e
        else:
            if source is None or getattr(source, "closed", False):
                raise SourceUnavailableError("source stream is not available")
            self._name = getattr(source, "name", "<stream>")
            self._stream = source
        self._consumed = False
        self.row_index = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._stream is None

    def __enter__(self) -> TabularRecordReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[list[str]]:
        return self.rows()

    def close(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()

    def rows(self) -> Iterator[list[str]]:
        """Yield rows in source order. May be called only once."""
        if self._consumed or self._stream is None:
            raise TabularReaderError(f"source {self._name} already consumed")
        self._consumed = True
        return self._generate(self._stream)

    def _readline(self, stream: TextIO) -> str:
        try:
            return stream.readline()
        except UnicodeDecodeError as e:
            raise TabularReaderError(
                f"{self._name}: cannot decode row {self.row_index + 1}: {e}"
            ) from e

    def _generate(self, stream: TextIO) -> Iterator[list[str]]:
        self.row_index = 0
        try:
            while True:
                raw = self._readline(stream)
                if raw == "":
                    break
                line = _strip_terminator(raw)
                # parity is carried across appends, each physical line is scanned once
                in_quotes = scan_quotes(line)
                if in_quotes:
                    parts = [line]
                    while in_quotes:
                        nxt = self._readline(stream)
                        if nxt == "":
                            logger.warning(
                                f"{self._name}: unbalanced quote at end of input, "
                                f"emitting buffered text as row {self.row_index + 1}"
                            )
                            break
                        segment = _strip_terminator(nxt)
                        in_quotes = scan_quotes(segment, in_quotes)
                        parts.append(segment)
                    line = "\n".join(parts)
                self.row_index += 1
                yield parse_line(line)
        finally:
            self.close()
