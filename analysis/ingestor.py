"""
analysis/ingestor.py

Decodes an uploaded CSV byte buffer into an immutable Dataset.
"""

from __future__ import annotations

import csv
import io
import sys
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

Row = Mapping[str, str]


def _lift_field_size_limit() -> None:
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            # C long is 32 bits on some platforms
            limit //= 2


_lift_field_size_limit()


class ParseError(ValueError):
    """
    Raised when an uploaded buffer is not well-formed CSV.
    """

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


@dataclass(frozen=True)
class Dataset:
    """
    Ordered rows sharing one header.

    Every row exposes exactly ``columns`` as keys, in header order.
    """

    columns: tuple[str, ...]
    rows: tuple[Row, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)

    def values(self, column: str) -> list[str]:
        """
        Return the raw values of one column in row order.
        """

        return [row[column] for row in self.rows]

    def to_records(self) -> list[dict[str, str]]:
        """
        Return plain dict copies of the rows, suitable for JSON encoding.
        """

        return [dict(row) for row in self.rows]


def parse(buffer: bytes) -> Dataset:
    """
    Parse a CSV byte buffer whose first line is the header.

    Blank lines are skipped. Any structural defect raises ``ParseError``
    instead of yielding a truncated dataset.
    """

    try:
        text = buffer.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("CSV file is not valid UTF-8 text.") from exc

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    columns: tuple[str, ...] | None = None
    rows: list[Row] = []

    try:
        for record in reader:
            if not record:
                continue
            if columns is None:
                columns = _validate_header(record, reader.line_num)
                continue
            if len(record) != len(columns):
                raise ParseError(
                    f"Expected {len(columns)} columns but found {len(record)}.",
                    line_number=reader.line_num,
                )
            rows.append(MappingProxyType(dict(zip(columns, record))))
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV: {exc}", line_number=reader.line_num) from exc

    return Dataset(columns=columns or (), rows=tuple(rows))


def _validate_header(record: list[str], line_number: int) -> tuple[str, ...]:
    seen: set[str] = set()
    for name in record:
        if name in seen:
            raise ParseError(f"Duplicate column name '{name}' in header.", line_number=line_number)
        seen.add(name)
    return tuple(record)
