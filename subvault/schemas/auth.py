"""Auth Schemas: vault unlock and token verification."""

from pydantic import Field

from subvault.schemas.base import CamelModel


class UnlockRequest(CamelModel):
    master_key: str = Field(min_length=1, max_length=1024)


class UnlockResponse(CamelModel):
    token: str
    vault_id: str
    is_new: bool


class VerifyResponse(CamelModel):
    vault_id: str
    valid: bool = True
