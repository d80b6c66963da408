"""Request Dependencies: bearer-token authentication.

Invariants:
    - current_vault_id accepts exactly "Bearer <token>" (case-sensitive scheme)
    - Missing header → MISSING_TOKEN, wrong shape → INVALID_AUTH_FORMAT,
      bad/expired token → INVALID_TOKEN (all 401)
"""

from fastapi import Header

from subvault.config import get_settings
from subvault.core.domain_types import VaultId
from subvault.core.errors import AuthenticationError
from subvault.infrastructure.tokens import decode_access_token


async def current_vault_id(
    authorization: str | None = Header(default=None),
) -> VaultId:
    if not authorization:
        raise AuthenticationError(
            "No authentication token provided", "MISSING_TOKEN",
        )
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthenticationError(
            "Authorization header must be 'Bearer <token>'", "INVALID_AUTH_FORMAT",
        )
    return decode_access_token(parts[1], get_settings().jwt_secret)
