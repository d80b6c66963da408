"""Vault-scoped record lookup shared by the CRUD routes.

Invariants:
    - Every lookup filters by both id and vault_id: another vault's record is
      indistinguishable from a missing one (404)
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from subvault.core.errors import ErrorContext, ResourceNotFoundError


async def get_owned_or_404(
    db: AsyncSession, model, record_id: str, vault_id: str, resource_type: str,
):
    result = await db.execute(
        select(model).where(model.id == record_id, model.vault_id == vault_id),
    )
    record = result.scalar_one_or_none()
    if record is None:
        raise ResourceNotFoundError(
            resource_type, record_id, ErrorContext(vault_id=vault_id),
        )
    return record


async def list_owned(db: AsyncSession, model, vault_id: str, *order_by):
    query = select(model).where(model.vault_id == vault_id)
    if order_by:
        query = query.order_by(*order_by)
    result = await db.execute(query)
    return list(result.scalars().all())


async def delete_owned_or_404(
    db: AsyncSession, model, record_id: str, vault_id: str, resource_type: str,
) -> None:
    """Delete in one statement; 404 when no row matched."""
    result = await db.execute(
        delete(model).where(model.id == record_id, model.vault_id == vault_id),
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ResourceNotFoundError(
            resource_type, record_id, ErrorContext(vault_id=vault_id),
        )
    await db.commit()
