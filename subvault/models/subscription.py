"""Subscription ORM: a recurring (or one-off PERMANENT) payment.

Invariants:
    - frequency_unit is a FrequencyUnit value; frequency_amount >= 1
    - renewal_date/start_date are YYYY-MM-DD strings (may be empty)
    - tag_ids is a comma-separated list of Tag ids
    - credential_id is cleared when the referenced credential is deleted

Design Decisions:
    - Dates kept as strings: the client edits them as plain date inputs and
      unparseable values are skipped by core/billing.py instead of rejected
"""

from datetime import datetime

from sqlalchemy import String, Integer, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from subvault.core.domain_types import (
    DEFAULT_CATEGORY, DEFAULT_CURRENCY, FrequencyUnit,
)
from subvault.db.base import Base, new_id, utcnow


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    vault_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vaults.id", ondelete="CASCADE"),
        index=True, nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default=DEFAULT_CURRENCY,
    )
    frequency_amount: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1,
    )
    frequency_unit: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FrequencyUnit.MONTHS.value,
    )
    renewal_date: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    start_date: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_CATEGORY,
    )
    tag_ids: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    credential_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    website: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
