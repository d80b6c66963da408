"""Notification Routes: reminder preferences and the upcoming-renewals feed.

Invariants:
    - GET settings answers defaults (enabled, "1,3,7") until the vault saves any
    - Saved offsets are normalised (sorted, deduplicated); malformed lists
      are rejected with 400 INVALID_INPUT
    - Upcoming renewals cover active subscriptions due within the next 30 days,
      overdue ones reported with daysLeft 0
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.core.billing import find_upcoming_renewals, normalize_days_before_list
from subvault.core.domain_types import VaultId
from subvault.infrastructure.database import get_db
from subvault.models.notification_setting import NotificationSetting
from subvault.models.subscription import Subscription
from subvault.schemas.base import MessageResponse
from subvault.schemas.settings import (
    NotificationSettingsIn, NotificationSettingsOut, UpcomingRenewalOut,
)

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


async def _get_settings_row(
    db: AsyncSession, vault_id: str,
) -> NotificationSetting | None:
    result = await db.execute(
        select(NotificationSetting).where(NotificationSetting.vault_id == vault_id),
    )
    return result.scalar_one_or_none()


@router.get("/settings", response_model=NotificationSettingsOut)
async def get_notification_settings(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    row = await _get_settings_row(db, vault_id)
    if row is None:
        return NotificationSettingsOut()
    return NotificationSettingsOut(
        enabled=row.enabled, days_before_list=row.days_before_list,
    )


@router.post("/settings", response_model=MessageResponse)
async def save_notification_settings(
    body: NotificationSettingsIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    days_before_list = normalize_days_before_list(body.days_before_list)
    row = await _get_settings_row(db, vault_id)
    if row is None:
        row = NotificationSetting(vault_id=vault_id)
        db.add(row)
    row.enabled = body.enabled
    row.days_before_list = days_before_list
    await db.commit()
    return MessageResponse(message="Saved")


@router.get("/upcoming", response_model=list[UpcomingRenewalOut])
async def list_upcoming_renewals(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Subscription).where(
            Subscription.vault_id == vault_id, Subscription.active.is_(True),
        ),
    )
    upcoming = find_upcoming_renewals(
        result.scalars().all(), datetime.now(timezone.utc),
    )
    return [UpcomingRenewalOut.model_validate(u) for u in upcoming]
