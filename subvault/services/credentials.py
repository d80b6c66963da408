"""Credential Sealing: encrypt credential secrets at rest, reveal them on read.

Invariants:
    - password and notes are sealed before they reach the ORM row
    - reveal_credential builds a CredentialOut; the ORM row is never mutated
      with plaintext (it would be flushed back on the next commit)
    - A row that fails to decrypt is returned with its stored value and a
      warning log, so one bad row never hides the rest of the vault
"""

import logging

from subvault.core.errors import EncryptionError
from subvault.infrastructure import crypto
from subvault.models.credential import Credential
from subvault.schemas.vault import CredentialIn, CredentialOut

logger = logging.getLogger(__name__)

SEALED_FIELDS = ("password", "notes")


def seal_credential_fields(payload: CredentialIn, key: str) -> dict:
    """Column values for a create/replace, with secret fields encrypted."""
    return {
        "username": payload.username,
        "label": payload.label,
        "password": crypto.encrypt(payload.password, key),
        "notes": crypto.encrypt(payload.notes, key),
    }


def _reveal_field(row: Credential, field_name: str, key: str) -> str:
    stored = getattr(row, field_name)
    try:
        return crypto.decrypt(stored, key)
    except EncryptionError as e:
        logger.warning(
            f"Could not decrypt credential {field_name}: {e.message}",
            extra={"vault_id": row.vault_id, "error_code": e.code},
        )
        return stored


def reveal_credential(row: Credential, key: str) -> CredentialOut:
    out = CredentialOut.model_validate(row)
    return out.model_copy(update={
        name: _reveal_field(row, name, key) for name in SEALED_FIELDS
    })
