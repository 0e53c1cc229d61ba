"""
analysis/insights.py

Threshold rules that turn aggregates into plain-language insights.
"""

from __future__ import annotations

from analysis.aggregates import (
    GeographicAggregate,
    MerchantAggregate,
    TransactionAggregate,
    UserAggregate,
)

HIGH_VALUE_PERCENTAGE_THRESHOLD = 20
MERCHANT_CONCENTRATION_THRESHOLD = 30
GEOGRAPHIC_CONCENTRATION_THRESHOLD = 40
TRANSACTIONS_PER_USER_THRESHOLD = 3

HIGH_VALUE_INSIGHT = "High-value transactions represent a significant portion of volume"
MERCHANT_CONCENTRATION_INSIGHT = "Merchant concentration is high - opportunity for diversification"
GEOGRAPHIC_CONCENTRATION_INSIGHT = "Geographic concentration suggests regional expansion opportunities"
USER_ENGAGEMENT_INSIGHT = "Users show good engagement with multiple transactions"


def derive_insights(
    *,
    transactions: TransactionAggregate | None,
    merchants: MerchantAggregate | None,
    locations: GeographicAggregate | None,
    users: UserAggregate | None,
) -> tuple[str, ...]:
    """
    Evaluate each rule in fixed order.

    Nothing is reported without a transaction aggregate, even when other
    rules would match on their own.
    """

    if transactions is None:
        return ()

    insights: list[str] = []
    if transactions.high_value_percentage > HIGH_VALUE_PERCENTAGE_THRESHOLD:
        insights.append(HIGH_VALUE_INSIGHT)
    if merchants is not None and merchants.merchant_concentration > MERCHANT_CONCENTRATION_THRESHOLD:
        insights.append(MERCHANT_CONCENTRATION_INSIGHT)
    if locations is not None and locations.geographic_concentration > GEOGRAPHIC_CONCENTRATION_THRESHOLD:
        insights.append(GEOGRAPHIC_CONCENTRATION_INSIGHT)
    if users is not None and users.average_transactions_per_user > TRANSACTIONS_PER_USER_THRESHOLD:
        insights.append(USER_ENGAGEMENT_INSIGHT)
    return tuple(insights)
