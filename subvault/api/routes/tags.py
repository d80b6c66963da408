"""Tag Routes: vault-scoped subscription categories.

Invariants:
    - A new tag without a colour gets DEFAULT_TAG_COLOR
    - PUT is partial: empty name/color keep the stored value
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.api.dependencies import current_vault_id
from subvault.core.domain_types import DEFAULT_TAG_COLOR, VaultId
from subvault.infrastructure.database import get_db
from subvault.models.tag import Tag
from subvault.schemas.base import MessageResponse
from subvault.schemas.settings import TagCreate, TagOut, TagUpdate
from subvault.services.records import (
    delete_owned_or_404, get_owned_or_404, list_owned,
)

router = APIRouter(prefix="/api/v1/tags", tags=["tags"])


@router.get("", response_model=list[TagOut])
async def list_tags(
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    return await list_owned(db, Tag, vault_id, Tag.created_at.asc())


@router.post("", response_model=TagOut, status_code=status.HTTP_201_CREATED)
async def create_tag(
    body: TagCreate,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    tag = Tag(
        vault_id=vault_id, name=body.name, color=body.color or DEFAULT_TAG_COLOR,
    )
    db.add(tag)
    await db.commit()
    await db.refresh(tag)
    return tag


@router.put("/{tag_id}", response_model=TagOut)
async def update_tag(
    tag_id: str,
    body: TagUpdate,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    tag = await get_owned_or_404(db, Tag, tag_id, vault_id, "Tag")
    if body.name:
        tag.name = body.name
    if body.color:
        tag.color = body.color
    await db.commit()
    await db.refresh(tag)
    return tag


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(
    tag_id: str,
    vault_id: VaultId = Depends(current_vault_id),
    db: AsyncSession = Depends(get_db),
):
    await delete_owned_or_404(db, Tag, tag_id, vault_id, "Tag")
    return MessageResponse(message="Deleted")
