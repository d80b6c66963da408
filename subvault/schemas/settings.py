"""Settings Schemas: tags, notification preferences, renewals and analytics."""

from datetime import datetime

from pydantic import Field

from subvault.core.domain_types import DEFAULT_DAYS_BEFORE_LIST
from subvault.schemas.base import CamelModel


class TagCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = Field("", max_length=20)


class TagUpdate(CamelModel):
    """Partial update: empty fields keep their stored value."""
    name: str = Field("", max_length=100)
    color: str = Field("", max_length=20)


class TagOut(CamelModel):
    id: str
    vault_id: str
    name: str
    color: str
    created_at: datetime


class NotificationSettingsIn(CamelModel):
    enabled: bool = False
    days_before_list: str = Field("", max_length=100)


class NotificationSettingsOut(CamelModel):
    enabled: bool = True
    days_before_list: str = DEFAULT_DAYS_BEFORE_LIST


class UpcomingRenewalOut(CamelModel):
    id: str
    name: str
    cost: float
    currency: str
    renewal_date: str
    days_left: int


class MonthlySpendOut(CamelModel):
    month: str
    amount: float


class CategorySpendOut(CamelModel):
    category: str
    amount: float
    percentage: float
    count: int


class CurrencySpendOut(CamelModel):
    currency: str
    amount: float
    count: int


class AnalyticsOut(CamelModel):
    monthly_spending: list[MonthlySpendOut]
    category_breakdown: list[CategorySpendOut]
    currency_breakdown: list[CurrencySpendOut]
    total_monthly: float
    total_yearly: float
    subscription_count: int
    upcoming_count: int
