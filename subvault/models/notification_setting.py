"""NotificationSetting ORM: renewal reminder preferences, one row per vault.

Invariants:
    - vault_id is unique (upserted by POST /notifications/settings)
    - days_before_list is a comma-separated list of day offsets, e.g. "1,3,7"
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from subvault.core.domain_types import DEFAULT_DAYS_BEFORE_LIST
from subvault.db.base import Base, new_id, utcnow


class NotificationSetting(Base):
    __tablename__ = "notification_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    vault_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vaults.id", ondelete="CASCADE"),
        unique=True, nullable=False,
    )
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    days_before_list: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_DAYS_BEFORE_LIST,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
