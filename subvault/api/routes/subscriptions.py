"""Subscription Routes: vault-scoped CRUD.

Invariants:
    - PUT replaces every editable field (the client always sends the full form)
    - Rows of other vaults answer 404
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.core.domain_types import VaultId
from subvault.infrastructure.database import get_db
from subvault.models.subscription import Subscription
from subvault.schemas.base import MessageResponse
from subvault.schemas.vault import SubscriptionIn, SubscriptionOut
from subvault.services.records import (
    delete_owned_or_404, get_owned_or_404, list_owned,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


def _column_values(body: SubscriptionIn) -> dict:
    values = body.model_dump()
    values["frequency_unit"] = body.frequency_unit.value
    return values


@router.get("", response_model=list[SubscriptionOut])
async def list_subscriptions(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await list_owned(db, Subscription, vault_id)


@router.post(
    "", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    body: SubscriptionIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    subscription = Subscription(vault_id=vault_id, **_column_values(body))
    db.add(subscription)
    await db.commit()
    await db.refresh(subscription)
    logger.info("Subscription created", extra={"vault_id": vault_id})
    return subscription


@router.put("/{subscription_id}", response_model=SubscriptionOut)
async def update_subscription(
    subscription_id: str,
    body: SubscriptionIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    subscription = await get_owned_or_404(
        db, Subscription, subscription_id, vault_id, "Subscription",
    )
    for name, value in _column_values(body).items():
        setattr(subscription, name, value)
    await db.commit()
    await db.refresh(subscription)
    return subscription


@router.delete("/{subscription_id}", response_model=MessageResponse)
async def delete_subscription(
    subscription_id: str,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned_or_404(
        db, Subscription, subscription_id, vault_id, "Subscription",
    )
    return MessageResponse(message="Deleted")
