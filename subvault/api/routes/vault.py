"""Vault Route: the full decrypted vault snapshot in one request."""

import time

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.config import get_settings
from subvault.core.domain_types import VaultId
from subvault.infrastructure.database import get_db
from subvault.models.credential import Credential
from subvault.models.subscription import Subscription
from subvault.schemas.vault import SubscriptionOut, VaultData
from subvault.services.credentials import reveal_credential
from subvault.services.records import list_owned

router = APIRouter(prefix="/api/v1", tags=["vault"])


@router.get("/vault", response_model=VaultData)
async def get_vault(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    key = get_settings().encryption_key
    credentials = await list_owned(db, Credential, vault_id)
    subscriptions = await list_owned(db, Subscription, vault_id)
    return VaultData(
        credentials=[reveal_credential(c, key) for c in credentials],
        subscriptions=[SubscriptionOut.model_validate(s) for s in subscriptions],
        last_updated=int(time.time() * 1000),
    )
