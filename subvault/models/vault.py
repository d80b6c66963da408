"""Vault ORM: the identity a master key unlocks.

Invariants:
    - key_hash is the SHA-256 hex of the master key, unique across vaults
    - The master key itself is never stored
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from subvault.db.base import Base, new_id, utcnow


class Vault(Base):
    """Vault aggregate root: owns credentials, subscriptions, tags and AI data."""
    __tablename__ = "vaults"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    key_hash: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
