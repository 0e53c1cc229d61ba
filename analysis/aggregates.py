"""
analysis/aggregates.py

Role-specific aggregate reducers for the pattern analyzer.

Every reducer is a pure function over the row sequence and returns a frozen
record. No I/O, no logging, and no shared state. Empty inputs resolve to
zero-valued fields rather than errors.
"""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import reduce
from typing import Any

from analysis.ingestor import Row

FrequencyPair = tuple[str, int]

HIGH_VALUE_MULTIPLIER = 2
TOP_MERCHANTS = 10
TOP_CATEGORIES = 5
TOP_LOCATIONS = 5
TOP_ACTIVE_USERS = 10
TOP_USERS = 5

_NUMBER = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
_LEADING_NUMBER = re.compile(rf"\s*({_NUMBER})")
_WHOLE_NUMBER = re.compile(rf"\s*{_NUMBER}\s*")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def running_total(numbers: Iterable[float]) -> float:
    """
    Add ``numbers`` one by one from the left, without compensated summation.

    The built-in ``sum`` compensates float rounding from Python 3.12 on,
    which would make totals depend on the interpreter version.
    """

    return reduce(operator.add, numbers, 0.0)


def parse_number(value: str | None) -> float | None:
    """
    Parse the leading numeric prefix of ``value``.

    ``"12.5"`` and ``"12.5 NPR"`` both yield ``12.5``; ``"NPR 12"``, blank
    and non-finite values yield ``None``.
    """

    if value is None:
        return None
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def is_number(value: str) -> bool:
    """
    Return True when the whole of ``value`` is a finite decimal number.
    """

    return _WHOLE_NUMBER.fullmatch(value) is not None and parse_number(value) is not None


def count_frequencies(values: Iterable[str]) -> list[FrequencyPair]:
    """
    Count occurrences, keeping keys in first-occurrence order.
    """

    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return list(counts.items())


def rank_frequencies(pairs: Sequence[FrequencyPair]) -> list[FrequencyPair]:
    """
    Sort by descending count. Ties keep their incoming order.
    """

    return sorted(pairs, key=lambda pair: pair[1], reverse=True)


def concentration(top: Sequence[FrequencyPair], total: int) -> float:
    """
    Share of the most frequent value as a percentage; 0 when empty.
    """

    if not top or total == 0:
        return 0.0
    return top[0][1] / total * 100


def _non_empty(rows: Iterable[Row], column: str) -> list[str]:
    return [row[column] for row in rows if row[column]]


def _pairs_to_lists(pairs: Sequence[FrequencyPair]) -> list[list[Any]]:
    return [[value, count] for value, count in pairs]


# ---------------------------------------------------------------------------
# Aggregate records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionAggregate:
    total_transactions: int
    total_volume: float
    average_amount: float
    min_amount: float
    max_amount: float
    median_amount: float
    high_value_threshold: float
    high_value_count: int
    high_value_percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTransactions": self.total_transactions,
            "totalVolume": self.total_volume,
            "averageAmount": self.average_amount,
            "minAmount": self.min_amount,
            "maxAmount": self.max_amount,
            "medianAmount": self.median_amount,
            "highValueThreshold": self.high_value_threshold,
            "highValueCount": self.high_value_count,
            "highValuePercentage": self.high_value_percentage,
        }


@dataclass(frozen=True)
class MerchantAggregate:
    unique_merchants: int
    top_merchants: tuple[FrequencyPair, ...]
    merchant_concentration: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "uniqueMerchants": self.unique_merchants,
            "topMerchants": _pairs_to_lists(self.top_merchants),
            "merchantConcentration": self.merchant_concentration,
        }


@dataclass(frozen=True)
class CategoryAggregate:
    unique_categories: int
    top_categories: tuple[FrequencyPair, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "uniqueCategories": self.unique_categories,
            "topCategories": _pairs_to_lists(self.top_categories),
        }


@dataclass(frozen=True)
class GeographicAggregate:
    unique_locations: int
    top_locations: tuple[FrequencyPair, ...]
    geographic_concentration: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "uniqueLocations": self.unique_locations,
            "topLocations": _pairs_to_lists(self.top_locations),
            "geographicConcentration": self.geographic_concentration,
        }


@dataclass(frozen=True)
class UserAggregate:
    unique_users: int
    active_users: tuple[FrequencyPair, ...]
    average_transactions_per_user: float
    top_users: tuple[FrequencyPair, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "uniqueUsers": self.unique_users,
            "activeUsers": len(self.active_users),
            "averageTransactionsPerUser": self.average_transactions_per_user,
            "topUsers": _pairs_to_lists(self.top_users),
        }


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def summarize_transactions(rows: Iterable[Row], column: str) -> TransactionAggregate | None:
    """
    Aggregate the amount column; ``None`` when no value parses.

    The median is the element at ``n // 2`` of the ascending list, so for
    an even count it is the upper of the two middle values.
    """

    amounts = [number for number in (parse_number(row[column]) for row in rows) if number is not None]
    if not amounts:
        return None

    count = len(amounts)
    total = running_total(amounts)
    average = total / count
    threshold = average * HIGH_VALUE_MULTIPLIER
    high_value_count = sum(1 for amount in amounts if amount > threshold)

    return TransactionAggregate(
        total_transactions=count,
        total_volume=total,
        average_amount=average,
        min_amount=min(amounts),
        max_amount=max(amounts),
        median_amount=sorted(amounts)[count // 2],
        high_value_threshold=threshold,
        high_value_count=high_value_count,
        high_value_percentage=high_value_count / count * 100,
    )


def summarize_merchants(rows: Iterable[Row], column: str) -> MerchantAggregate:
    merchants = _non_empty(rows, column)
    frequencies = count_frequencies(merchants)
    top = tuple(rank_frequencies(frequencies)[:TOP_MERCHANTS])
    return MerchantAggregate(
        unique_merchants=len(frequencies),
        top_merchants=top,
        merchant_concentration=concentration(top, len(merchants)),
    )


def summarize_categories(rows: Iterable[Row], column: str) -> CategoryAggregate:
    frequencies = count_frequencies(_non_empty(rows, column))
    return CategoryAggregate(
        unique_categories=len(frequencies),
        top_categories=tuple(rank_frequencies(frequencies)[:TOP_CATEGORIES]),
    )


def summarize_locations(rows: Iterable[Row], column: str) -> GeographicAggregate:
    locations = _non_empty(rows, column)
    frequencies = count_frequencies(locations)
    top = tuple(rank_frequencies(frequencies)[:TOP_LOCATIONS])
    return GeographicAggregate(
        unique_locations=len(frequencies),
        top_locations=top,
        geographic_concentration=concentration(top, len(locations)),
    )


def summarize_users(rows: Iterable[Row], column: str) -> UserAggregate:
    """
    Aggregate user activity.

    Active users are those with more than one transaction.
    """

    users = _non_empty(rows, column)
    frequencies = count_frequencies(users)
    repeat_users = [pair for pair in frequencies if pair[1] > 1]
    active = tuple(rank_frequencies(repeat_users)[:TOP_ACTIVE_USERS])
    unique = len(frequencies)
    return UserAggregate(
        unique_users=unique,
        active_users=active,
        average_transactions_per_user=len(users) / unique if unique else 0.0,
        top_users=active[:TOP_USERS],
    )
