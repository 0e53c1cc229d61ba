"""
analysis/analyzer.py

Pattern analyzer entry point.

Combines role inference, per-role aggregates, insight rules and the column
summary into a single deterministic result. Identical datasets always yield
identical results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from analysis.aggregates import (
    CategoryAggregate,
    GeographicAggregate,
    MerchantAggregate,
    TransactionAggregate,
    UserAggregate,
    summarize_categories,
    summarize_locations,
    summarize_merchants,
    summarize_transactions,
    summarize_users,
)
from analysis.ingestor import Dataset
from analysis.insights import derive_insights
from analysis.profiling import build_summary
from analysis.roles import RoleAssignment, resolve_roles


@dataclass(frozen=True)
class PatternReport:
    """
    Structured analyzer output.

    An aggregate is ``None`` when its role has no matching column, which
    means "not applicable" rather than zero.
    """

    roles: RoleAssignment = field(default_factory=RoleAssignment)
    transactions: TransactionAggregate | None = None
    merchants: MerchantAggregate | None = None
    categories: CategoryAggregate | None = None
    locations: GeographicAggregate | None = None
    users: UserAggregate | None = None
    insights: tuple[str, ...] = ()

    @property
    def merchant_concentration(self) -> float:
        return self.merchants.merchant_concentration if self.merchants is not None else 0.0

    @property
    def geographic_concentration(self) -> float:
        return self.locations.geographic_concentration if self.locations is not None else 0.0

    def is_empty(self) -> bool:
        return (
            self.transactions is None
            and self.merchants is None
            and self.categories is None
            and self.locations is None
            and self.users is None
            and not self.insights
        )

    def to_dict(self) -> dict[str, Any]:
        """
        JSON-ready representation used in the use-case prompt.
        """

        payload: dict[str, Any] = {
            "transactionPatterns": _as_dict(self.transactions),
            "userPatterns": _as_dict(self.users),
            "geographicPatterns": _as_dict(self.locations),
            "temporalPatterns": {},
            "merchantPatterns": _as_dict(self.merchants),
        }
        if self.categories is not None:
            payload["categoryPatterns"] = self.categories.to_dict()
        payload["insights"] = list(self.insights)
        return payload


@dataclass(frozen=True)
class AnalysisResult:
    summary: str
    patterns: PatternReport


def _as_dict(aggregate: Any) -> dict[str, Any]:
    return aggregate.to_dict() if aggregate is not None else {}


def analyze_patterns(dataset: Dataset, roles: RoleAssignment | None = None) -> PatternReport:
    """
    Compute the per-role aggregates and derived insights.
    """

    if not dataset:
        return PatternReport()

    if roles is None:
        roles = resolve_roles(dataset.columns)
    rows = dataset.rows

    transactions = summarize_transactions(rows, roles.amount) if roles.amount is not None else None
    merchants = summarize_merchants(rows, roles.merchant) if roles.merchant is not None else None
    categories = summarize_categories(rows, roles.category) if roles.category is not None else None
    locations = summarize_locations(rows, roles.location) if roles.location is not None else None
    users = summarize_users(rows, roles.user) if roles.user is not None else None

    return PatternReport(
        roles=roles,
        transactions=transactions,
        merchants=merchants,
        categories=categories,
        locations=locations,
        users=users,
        insights=derive_insights(
            transactions=transactions,
            merchants=merchants,
            locations=locations,
            users=users,
        ),
    )


def analyze(dataset: Dataset) -> AnalysisResult:
    """
    Produce the summary text and the pattern report for ``dataset``.

    The empty dataset yields the "No data available" summary and an empty
    report.
    """

    if not dataset:
        return AnalysisResult(summary=build_summary(dataset, RoleAssignment()), patterns=PatternReport())

    roles = resolve_roles(dataset.columns)
    return AnalysisResult(
        summary=build_summary(dataset, roles),
        patterns=analyze_patterns(dataset, roles),
    )
