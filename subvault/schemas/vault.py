"""Vault Schemas: credentials, subscriptions and the full vault snapshot.

Invariants:
    - CredentialOut always carries plaintext built by services/credentials.py,
      never an ORM row's sealed fields
    - SubscriptionIn.frequency_amount >= 1 (monthly normalisation divides by it)
"""

from datetime import datetime

from pydantic import Field

from subvault.core.domain_types import (
    DEFAULT_CATEGORY, DEFAULT_CURRENCY, FrequencyUnit,
)
from subvault.schemas.base import CamelModel


class CredentialIn(CamelModel):
    """Create/replace payload: every editable field is written."""
    username: str = Field(max_length=255)
    password: str = ""
    label: str = Field(min_length=1, max_length=255)
    notes: str = ""


class CredentialOut(CamelModel):
    id: str
    vault_id: str
    username: str
    password: str = ""
    label: str
    notes: str = ""
    created_at: datetime
    updated_at: datetime


class SubscriptionIn(CamelModel):
    """Create/replace payload: every editable field is written."""
    name: str = Field(min_length=1, max_length=255)
    cost: float = Field(ge=0)
    currency: str = Field(DEFAULT_CURRENCY, max_length=10)
    frequency_amount: int = Field(1, ge=1)
    frequency_unit: FrequencyUnit = FrequencyUnit.MONTHS
    renewal_date: str = Field("", max_length=10)
    start_date: str = Field("", max_length=10)
    category: str = Field(DEFAULT_CATEGORY, max_length=100)
    tag_ids: str = ""
    credential_id: str | None = None
    website: str = Field("", max_length=500)
    active: bool = True


class SubscriptionOut(CamelModel):
    id: str
    vault_id: str
    name: str
    cost: float
    currency: str
    frequency_amount: int
    frequency_unit: str
    renewal_date: str
    start_date: str
    category: str
    tag_ids: str
    credential_id: str | None = None
    website: str
    active: bool
    created_at: datetime
    updated_at: datetime


class VaultData(CamelModel):
    credentials: list[CredentialOut]
    subscriptions: list[SubscriptionOut]
    last_updated: int
