"""Auth Routes: unlock (find-or-create a vault by master key) and token verification.

Invariants:
    - Only the SHA-256 of the master key is stored or compared
    - /unlock is rate limited per IP more strictly than the rest of the API
    - A new vault is created the first time an unknown master key is presented
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.config import get_settings
from subvault.core.domain_types import VaultId
from subvault.infrastructure.crypto import hash_master_key
from subvault.infrastructure.database import get_db
from subvault.infrastructure.rate_limit import enforce_default_limit, limiter
from subvault.infrastructure.tokens import create_access_token
from subvault.models.vault import Vault
from subvault.schemas.auth import UnlockRequest, UnlockResponse, VerifyResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["auth"])
settings = get_settings()


@router.post("/unlock", response_model=UnlockResponse)
@limiter.limit(settings.rate_limit_unlock)
async def unlock(
    request: Request,
    body: UnlockRequest,
    db: AsyncSession = Depends(get_db),
):
    """Unlock the vault a master key identifies, creating it on first use."""
    key_hash = hash_master_key(body.master_key)
    result = await db.execute(select(Vault).where(Vault.key_hash == key_hash))
    vault = result.scalar_one_or_none()

    is_new = vault is None
    if is_new:
        vault = Vault(key_hash=key_hash)
        db.add(vault)
        await db.commit()
        logger.info("Vault created", extra={"vault_id": vault.id})

    token = create_access_token(
        vault.id, settings.jwt_secret, settings.token_ttl_hours,
    )
    return UnlockResponse(token=token, vault_id=vault.id, is_new=is_new)


@router.get(
    "/verify",
    response_model=VerifyResponse,
    dependencies=[Depends(enforce_default_limit)],
)
async def verify_token(vault_id: VaultId = Depends(current_vault_id)):
    return VerifyResponse(vault_id=vault_id, valid=True)
