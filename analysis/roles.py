"""
analysis/roles.py

Header-name driven inference of semantic column roles.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class ColumnRole(str, Enum):
    AMOUNT = "amount"
    MERCHANT = "merchant"
    CATEGORY = "category"
    LOCATION = "location"
    USER = "user"
    DATE = "date"


# Order matters only for iteration; each role scans the header independently.
ROLE_KEYWORDS: tuple[tuple[ColumnRole, tuple[str, ...]], ...] = (
    (ColumnRole.AMOUNT, ("amount", "value", "transaction_amount")),
    (ColumnRole.MERCHANT, ("merchant", "vendor", "store")),
    (ColumnRole.CATEGORY, ("category", "type", "transaction_type")),
    (ColumnRole.LOCATION, ("location", "region", "city", "area")),
    (ColumnRole.USER, ("user", "customer", "user_id")),
    (ColumnRole.DATE, ("date", "time", "timestamp")),
)

_KEYWORDS_BY_ROLE: dict[ColumnRole, tuple[str, ...]] = dict(ROLE_KEYWORDS)


@dataclass(frozen=True)
class RoleAssignment:
    """
    Resolved column name per role; ``None`` when no header matched.
    """

    amount: str | None = None
    merchant: str | None = None
    category: str | None = None
    location: str | None = None
    user: str | None = None
    date: str | None = None

    def column_for(self, role: ColumnRole) -> str | None:
        return getattr(self, role.value)

    def has(self, role: ColumnRole) -> bool:
        return self.column_for(role) is not None


def matches_role(column: str, role: ColumnRole) -> bool:
    """
    Return True when the lowercased column name contains any role keyword.
    """

    lowered = column.lower()
    return any(keyword in lowered for keyword in _KEYWORDS_BY_ROLE[role])


def find_role_column(columns: Sequence[str], role: ColumnRole) -> str | None:
    """
    Return the first column, in header order, matching ``role``.
    """

    for column in columns:
        if matches_role(column, role):
            return column
    return None


def resolve_roles(columns: Sequence[str]) -> RoleAssignment:
    """
    Resolve every role against the header.

    A single column may be bound to more than one role.
    """

    return RoleAssignment(
        **{role.value: find_role_column(columns, role) for role, _ in ROLE_KEYWORDS}
    )
