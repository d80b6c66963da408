"""Credential Routes: vault-scoped CRUD with sealed password and notes.

Invariants:
    - password/notes are encrypted before commit and decrypted in every response
    - PUT replaces every editable field; an empty password/notes clears it
    - DELETE unlinks subscriptions that reference the credential in the same
      transaction; a 404 rolls the unlink back
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.config import get_settings
from subvault.core.domain_types import VaultId
from subvault.infrastructure.database import get_db
from subvault.models.credential import Credential
from subvault.models.subscription import Subscription
from subvault.schemas.base import MessageResponse
from subvault.schemas.vault import CredentialIn, CredentialOut
from subvault.services.credentials import reveal_credential, seal_credential_fields
from subvault.services.records import (
    delete_owned_or_404, get_owned_or_404, list_owned,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/credentials", tags=["credentials"])


@router.get("", response_model=list[CredentialOut])
async def list_credentials(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    key = get_settings().encryption_key
    return [
        reveal_credential(c, key)
        for c in await list_owned(db, Credential, vault_id)
    ]


@router.post(
    "", response_model=CredentialOut, status_code=status.HTTP_201_CREATED,
)
async def create_credential(
    body: CredentialIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    key = get_settings().encryption_key
    credential = Credential(vault_id=vault_id, **seal_credential_fields(body, key))
    db.add(credential)
    await db.commit()
    await db.refresh(credential)
    logger.info("Credential created", extra={"vault_id": vault_id})
    return reveal_credential(credential, key)


@router.put("/{credential_id}", response_model=CredentialOut)
async def update_credential(
    credential_id: str,
    body: CredentialIn,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    key = get_settings().encryption_key
    credential = await get_owned_or_404(
        db, Credential, credential_id, vault_id, "Credential",
    )
    for name, value in seal_credential_fields(body, key).items():
        setattr(credential, name, value)
    await db.commit()
    await db.refresh(credential)
    return reveal_credential(credential, key)


@router.delete("/{credential_id}", response_model=MessageResponse)
async def delete_credential(
    credential_id: str,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    await db.execute(
        update(Subscription)
        .where(
            Subscription.vault_id == vault_id,
            Subscription.credential_id == credential_id,
        )
        .values(credential_id=None),
    )
    await delete_owned_or_404(
        db, Credential, credential_id, vault_id, "Credential",
    )
    return MessageResponse(message="Deleted")
