"""AIReport ORM: a stored spending analysis produced by POST /ai/analyze.

Invariants:
    - categories and insights are JSON-encoded text (list of dicts / list of str)
"""

from datetime import datetime

from sqlalchemy import String, Text, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from subvault.db.base import Base, new_id, utcnow


class AIReport(Base):
    __tablename__ = "ai_reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    vault_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vaults.id", ondelete="CASCADE"),
        index=True, nullable=False,
    )
    total_monthly: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_yearly: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    categories: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    insights: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True,
    )
