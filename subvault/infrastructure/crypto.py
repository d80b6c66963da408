"""Field Cipher: AES-256-GCM sealing of stored secrets and master key hashing.

Invariants:
    - Empty plaintext/ciphertext maps to empty string (nothing to protect)
    - Wire format: base64(nonce[12] || ciphertext || tag[16]), standard alphabet
    - AES key = SHA-256(configured key): any key string yields a 32-byte key
    - Every failure raised as EncryptionError; callers decide whether to degrade
"""

import base64
import binascii
import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from subvault.core.errors import EncryptionError

NONCE_SIZE = 12
MASK = "****"


def _derive_aes_key(key: str) -> bytes:
    return hashlib.sha256(key.encode("utf-8")).digest()


def encrypt(plaintext: str, key: str) -> str:
    """Seal plaintext with AES-256-GCM under a fresh random nonce."""
    if not plaintext:
        return ""
    nonce = os.urandom(NONCE_SIZE)
    sealed = AESGCM(_derive_aes_key(key)).encrypt(
        nonce, plaintext.encode("utf-8"), None,
    )
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt(ciphertext: str, key: str) -> str:
    """Open a value produced by encrypt()."""
    if not ciphertext:
        return ""
    try:
        data = base64.b64decode(ciphertext, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncryptionError(f"invalid base64: {e}", "decrypt")
    if len(data) < NONCE_SIZE:
        raise EncryptionError("ciphertext too short", "decrypt")

    nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        plaintext = AESGCM(_derive_aes_key(key)).decrypt(nonce, sealed, None)
    except InvalidTag:
        raise EncryptionError("authentication failed", "decrypt")
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        raise EncryptionError("plaintext is not valid UTF-8", "decrypt")


def hash_master_key(master_key: str) -> str:
    """SHA-256 hex digest identifying the vault a master key unlocks."""
    return hashlib.sha256(master_key.encode("utf-8")).hexdigest()


def mask_secret(value: str) -> str:
    """Show only the first and last 4 characters of a secret."""
    if len(value) > 8:
        return value[:4] + MASK + value[-4:]
    return MASK


def is_masked(value: str) -> bool:
    return MASK in value
