"""Access Tokens: HS256 JWTs carrying the unlocked vault id.

Invariants:
    - Claims: vaultId, iat, exp (iat + ttl)
    - decode_access_token never returns without a non-empty vaultId
    - All verification failures raised as AuthenticationError(INVALID_TOKEN)
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from subvault.core.domain_types import VaultId
from subvault.core.errors import AuthenticationError

ALGORITHM = "HS256"
VAULT_CLAIM = "vaultId"


def create_access_token(
    vault_id: str, secret: str, ttl_hours: int = 24, now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        VAULT_CLAIM: vault_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=ttl_hours),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> VaultId:
    """Verify signature and expiry; return the vault id claim."""
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token")

    vault_id = claims.get(VAULT_CLAIM)
    if not isinstance(vault_id, str) or not vault_id:
        raise AuthenticationError("Token has no vault")
    return VaultId(vault_id)
