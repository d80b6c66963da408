"""AIConfig ORM: per-vault OpenAI-compatible provider settings.

Invariants:
    - One row per vault (vault_id unique)
    - api_key holds ciphertext; it is only ever returned masked
"""

from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from subvault.db.base import Base, new_id, utcnow


class AIConfig(Base):
    __tablename__ = "ai_configs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    vault_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vaults.id", ondelete="CASCADE"),
        unique=True, nullable=False,
    )
    base_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    api_key: Mapped[str] = mapped_column(Text, nullable=False, default="")
    model: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    @property
    def is_complete(self) -> bool:
        return bool(self.base_url and self.api_key and self.model)
