"""
Password hashing and verification.

Argon2id over a per-user random salt, with the RFC 9106 low-memory cost
profile. The stored pair is the hex digest and the hex salt, kept in
separate columns. Verification recomputes the raw digest and compares
with hmac.compare_digest, so the comparison step takes the same time
whether the first or the last byte differs.
"""

import hmac
import secrets
from typing import Optional

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from argon2.profiles import RFC_9106_LOW_MEMORY

PROFILE = RFC_9106_LOW_MEMORY
KEY_LENGTH = PROFILE.hash_len
SALT_BYTES = 16


def generate_salt() -> str:
    """Return a new random salt as hex."""
    return secrets.token_hex(SALT_BYTES)


def _derive(plaintext: str, salt: str) -> bytes:
    return hash_secret_raw(
        secret=plaintext.encode("utf-8"),
        salt=salt.encode("utf-8"),
        time_cost=PROFILE.time_cost,
        memory_cost=PROFILE.memory_cost,
        parallelism=PROFILE.parallelism,
        hash_len=KEY_LENGTH,
        type=Type.ID,
    )


def hash_password(plaintext: str, salt: Optional[str] = None) -> tuple[str, str]:
    """
    Hash a plaintext password.

    Args:
        plaintext: The password as submitted
        salt: Existing salt to reuse; a new one is generated when omitted

    Returns:
        (hex digest, hex salt)
    """
    salt = salt or generate_salt()
    return _derive(plaintext, salt).hex(), salt


def verify_password(plaintext: str, stored_hash: str, stored_salt: str) -> bool:
    """
    Check a plaintext password against a stored digest and salt.

    Returns False for any malformed input instead of raising.
    """
    if not isinstance(plaintext, str) or not isinstance(stored_hash, str):
        return False
    if not isinstance(stored_salt, str) or not stored_salt:
        return False
    try:
        expected = bytes.fromhex(stored_hash)
    except ValueError:
        return False
    if len(expected) != KEY_LENGTH:
        return False
    try:
        actual = _derive(plaintext, stored_salt)
    except HashingError:
        # Salt shorter than Argon2 accepts.
        return False
    return hmac.compare_digest(actual, expected)


# Used when the email is unknown so a miss costs the same as a wrong password.
DUMMY_SALT = generate_salt()
DUMMY_HASH, _ = hash_password("turnstile-timing-dummy", DUMMY_SALT)
