"""Billing Math: monthly normalisation, renewal countdowns and spending analytics.

Invariants:
    - Pure functions: no DB, no clock reads (callers pass `now`)
    - PERMANENT subscriptions cost 0 per month and never renew
    - days_until truncates toward zero, like whole-day elapsed time
    - Unparseable renewal dates are skipped, never raised

Design Decisions:
    - Works on any object exposing the subscription attributes (ORM rows in
      production, SimpleNamespace in tests)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from subvault.core.domain_types import (
    DEFAULT_DAYS_BEFORE_LIST, FrequencyUnit, RENEWAL_DATE_FORMAT,
)
from subvault.core.errors import InvalidInputError

UPCOMING_WINDOW_DAYS = 30
DUE_SOON_DAYS = 7
TREND_MONTHS = 6
WEEKS_PER_MONTH = 4.33
DAYS_PER_MONTH = 30


def calculate_monthly_amount(cost: float, amount: int, unit: str) -> float:
    """Normalise a subscription cost to a per-month amount."""
    if unit == FrequencyUnit.DAYS:
        return cost * DAYS_PER_MONTH / amount
    if unit == FrequencyUnit.WEEKS:
        return cost * WEEKS_PER_MONTH / amount
    if unit == FrequencyUnit.MONTHS:
        return cost / amount
    if unit == FrequencyUnit.YEARS:
        return cost / (12 * amount)
    if unit == FrequencyUnit.PERMANENT:
        return 0.0
    return cost


def parse_renewal_date(value: str | None) -> datetime | None:
    """Parse YYYY-MM-DD as midnight UTC. Returns None when unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, RENEWAL_DATE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def days_until(renewal: datetime, now: datetime) -> int:
    """Whole days between now and renewal, truncated toward zero."""
    return int((renewal - now).total_seconds() / 86400)


def normalize_days_before_list(value: str) -> str:
    """Canonical "1,3,7" form of a reminder offset list; empty means the default.

    Offsets are whole days 1..UPCOMING_WINDOW_DAYS, deduplicated and sorted.
    """
    if not value.strip():
        return DEFAULT_DAYS_BEFORE_LIST
    days = set()
    for part in value.split(","):
        part = part.strip()
        if not (part.isascii() and part.isdigit()) or not 1 <= int(part) <= UPCOMING_WINDOW_DAYS:
            raise InvalidInputError(
                f"daysBeforeList must be comma-separated days between 1 and "
                f"{UPCOMING_WINDOW_DAYS}, got '{value}'",
                field="daysBeforeList",
            )
        days.add(int(part))
    return ",".join(str(d) for d in sorted(days))


@dataclass
class UpcomingRenewal:
    id: str
    name: str
    cost: float
    currency: str
    renewal_date: str
    days_left: int


def find_upcoming_renewals(subscriptions, now: datetime) -> list[UpcomingRenewal]:
    """Renewals due within UPCOMING_WINDOW_DAYS, soonest first.

    Overdue renewals are reported with days_left = 0.
    """
    upcoming = []
    for sub in subscriptions:
        if sub.frequency_unit == FrequencyUnit.PERMANENT:
            continue
        renewal = parse_renewal_date(sub.renewal_date)
        if renewal is None:
            continue
        days_left = max(days_until(renewal, now), 0)
        if days_left <= UPCOMING_WINDOW_DAYS:
            upcoming.append(UpcomingRenewal(
                id=sub.id,
                name=sub.name,
                cost=sub.cost,
                currency=sub.currency,
                renewal_date=sub.renewal_date,
                days_left=days_left,
            ))
    upcoming.sort(key=lambda r: r.days_left)
    return upcoming


def count_due_soon(subscriptions, now: datetime) -> int:
    """Renewals due in 0..DUE_SOON_DAYS days (overdue ones excluded)."""
    count = 0
    for sub in subscriptions:
        if sub.frequency_unit == FrequencyUnit.PERMANENT:
            continue
        renewal = parse_renewal_date(sub.renewal_date)
        if renewal is None:
            continue
        if 0 <= days_until(renewal, now) <= DUE_SOON_DAYS:
            count += 1
    return count


def trailing_months(now: datetime, count: int = TREND_MONTHS) -> list[str]:
    """The last `count` calendar months as YYYY-MM, oldest first, ending with now."""
    months = []
    for offset in range(count - 1, -1, -1):
        index = now.year * 12 + (now.month - 1) - offset
        months.append(f"{index // 12:04d}-{index % 12 + 1:02d}")
    return months


@dataclass
class CategorySpend:
    category: str
    amount: float
    percentage: float
    count: int


@dataclass
class CurrencySpend:
    currency: str
    amount: float
    count: int


@dataclass
class MonthlySpend:
    month: str
    amount: float


@dataclass
class SpendingSummary:
    total_monthly: float = 0.0
    total_yearly: float = 0.0
    subscription_count: int = 0
    upcoming_count: int = 0
    category_breakdown: list[CategorySpend] = field(default_factory=list)
    currency_breakdown: list[CurrencySpend] = field(default_factory=list)
    monthly_spending: list[MonthlySpend] = field(default_factory=list)


def summarize_spending(subscriptions, now: datetime) -> SpendingSummary:
    """Aggregate active subscriptions into the analytics dashboard payload.

    Category amounts are monthly-normalised; currency amounts are raw costs
    (one billing period each), since costs in different currencies cannot
    be summed into one total meaningfully.
    """
    subscriptions = list(subscriptions)
    category_amounts: dict[str, float] = {}
    category_counts: dict[str, int] = {}
    currency_amounts: dict[str, float] = {}
    currency_counts: dict[str, int] = {}
    total_monthly = 0.0

    for sub in subscriptions:
        monthly = calculate_monthly_amount(
            sub.cost, sub.frequency_amount, sub.frequency_unit,
        )
        total_monthly += monthly
        category_amounts[sub.category] = category_amounts.get(sub.category, 0.0) + monthly
        category_counts[sub.category] = category_counts.get(sub.category, 0) + 1
        currency_amounts[sub.currency] = currency_amounts.get(sub.currency, 0.0) + sub.cost
        currency_counts[sub.currency] = currency_counts.get(sub.currency, 0) + 1

    categories = [
        CategorySpend(
            category=name,
            amount=amount,
            percentage=(amount / total_monthly) * 100 if total_monthly > 0 else 0.0,
            count=category_counts[name],
        )
        for name, amount in category_amounts.items()
    ]
    categories.sort(key=lambda c: c.amount, reverse=True)

    currencies = [
        CurrencySpend(currency=code, amount=amount, count=currency_counts[code])
        for code, amount in currency_amounts.items()
    ]

    # TODO: derive per-month history from created_at once subscriptions keep
    # price history; every month currently repeats the present total.
    trend = [MonthlySpend(month=m, amount=total_monthly) for m in trailing_months(now)]

    return SpendingSummary(
        total_monthly=total_monthly,
        total_yearly=total_monthly * 12,
        subscription_count=len(subscriptions),
        upcoming_count=count_due_soon(subscriptions, now),
        category_breakdown=categories,
        currency_breakdown=currencies,
        monthly_spending=trend,
    )
