"""
Column profiling and summary text for the pattern analyzer.

Builds one profile per column and renders the dataset as the plain-text
analysis that is later embedded in the use-case prompt. Runs entirely
locally; no API calls.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal

from analysis.aggregates import (
    FrequencyPair,
    count_frequencies,
    is_number,
    parse_number,
    rank_frequencies,
    running_total,
)
from analysis.ingestor import Dataset
from analysis.roles import ColumnRole, RoleAssignment

NO_DATA_SUMMARY = "No data available"

MAX_SAMPLE_VALUES = 5
MAX_CATEGORICAL_UNIQUE = 20
TOP_VALUES = 3
SAMPLE_ROWS = 3

# wide enough for every finite float at two decimals
_WIDE_CONTEXT = Context(prec=400)

_PATTERN_SENTENCES: tuple[tuple[tuple[ColumnRole, ...], str], ...] = (
    (
        (ColumnRole.AMOUNT, ColumnRole.MERCHANT),
        "Transaction pattern detected: Amount + Merchant data available",
    ),
    ((ColumnRole.CATEGORY,), "Categorization pattern detected: Transaction categories available"),
    ((ColumnRole.LOCATION,), "Geographic pattern detected: Location data available"),
    ((ColumnRole.USER,), "User pattern detected: Individual user tracking available"),
    ((ColumnRole.DATE,), "Temporal pattern detected: Time-based analysis possible"),
)


@dataclass(frozen=True)
class NumericProfile:
    average: float
    minimum: float
    maximum: float


@dataclass(frozen=True)
class ColumnProfile:
    """
    Per-column statistics.

    ``numeric`` is set only when the first non-empty value is a number;
    ``top_values`` only when the column has at most 20 distinct values.
    """

    name: str
    unique_count: int
    sample_values: tuple[str, ...]
    numeric: NumericProfile | None = None
    top_values: tuple[FrequencyPair, ...] | None = None

    @property
    def has_more_samples(self) -> bool:
        return self.unique_count > len(self.sample_values)


def profile_column(dataset: Dataset, column: str) -> ColumnProfile:
    values = dataset.values(column)
    unique_values = list(dict.fromkeys(values))

    numeric = None
    first_filled = next((value for value in values if value), None)
    if first_filled is not None and is_number(first_filled):
        numbers = [number for number in map(parse_number, values) if number is not None]
        numeric = NumericProfile(
            average=running_total(numbers) / len(numbers),
            minimum=min(numbers),
            maximum=max(numbers),
        )

    top_values = None
    if 0 < len(unique_values) <= MAX_CATEGORICAL_UNIQUE:
        top_values = tuple(rank_frequencies(count_frequencies(values))[:TOP_VALUES])

    return ColumnProfile(
        name=column,
        unique_count=len(unique_values),
        sample_values=tuple(unique_values[:MAX_SAMPLE_VALUES]),
        numeric=numeric,
        top_values=top_values,
    )


def profile_columns(dataset: Dataset) -> tuple[ColumnProfile, ...]:
    return tuple(profile_column(dataset, column) for column in dataset.columns)


def format_fixed(value: float, places: int = 2) -> str:
    """
    Render ``value`` with ``places`` decimals, rounding ties away from zero.

    Rounding works on the exact binary value of the float, so ``0.125``
    gives ``0.13`` while ``1.005`` (stored just below) gives ``1.00``.
    """

    if not math.isfinite(value):
        return str(value).replace("inf", "Infinity").replace("nan", "NaN")
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE_CONTEXT))


def format_number(value: float) -> str:
    """
    Render a float without a trailing ``.0`` for whole numbers.
    """

    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_summary(dataset: Dataset, roles: RoleAssignment) -> str:
    """
    Render the human-readable dataset analysis.

    Sections: header counts, one block per column, detected patterns, and
    the first rows as compact JSON.
    """

    if not dataset:
        return NO_DATA_SUMMARY

    lines = [
        "CSV Data Analysis:",
        f"Total rows: {len(dataset)}",
        f"Columns: {', '.join(dataset.columns)}",
        "",
    ]
    for profile in profile_columns(dataset):
        lines.extend(_render_profile(profile))
        lines.append("")

    lines.append("Pattern Analysis:")
    for required_roles, sentence in _PATTERN_SENTENCES:
        if all(roles.has(role) for role in required_roles):
            lines.append(f"- {sentence}")

    lines.append("")
    lines.append(f"Sample Data (first {SAMPLE_ROWS} rows):")
    for index, row in enumerate(dataset.rows[:SAMPLE_ROWS], start=1):
        lines.append(f"Row {index}: {json.dumps(dict(row), ensure_ascii=False, separators=(',', ':'))}")

    return "\n".join(lines) + "\n"


def _render_profile(profile: ColumnProfile) -> list[str]:
    samples = ", ".join(profile.sample_values)
    if profile.has_more_samples:
        samples += "..."

    lines = [
        f"Column: {profile.name}",
        f"  - Unique values: {profile.unique_count}",
        f"  - Sample values: {samples}",
    ]
    if profile.numeric is not None:
        lines.append(
            "  - Numeric analysis: "
            f"Avg={format_fixed(profile.numeric.average)}, "
            f"Min={format_number(profile.numeric.minimum)}, "
            f"Max={format_number(profile.numeric.maximum)}"
        )
    if profile.top_values:
        top = ", ".join(f"{value}({count})" for value, count in profile.top_values)
        lines.append(f"  - Top values: {top}")
    return lines
