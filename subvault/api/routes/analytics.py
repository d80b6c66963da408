"""Analytics Route: spending totals and breakdowns over active subscriptions."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.core.billing import summarize_spending
from subvault.core.domain_types import VaultId
from subvault.infrastructure.database import get_db
from subvault.models.subscription import Subscription
from subvault.schemas.settings import AnalyticsOut

router = APIRouter(prefix="/api/v1", tags=["analytics"])


@router.get("/analytics", response_model=AnalyticsOut)
async def get_analytics(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Subscription).where(
            Subscription.vault_id == vault_id, Subscription.active.is_(True),
        ),
    )
    summary = summarize_spending(
        result.scalars().all(), datetime.now(timezone.utc),
    )
    return AnalyticsOut.model_validate(summary)
