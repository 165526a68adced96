"""
Credential verifier: bcrypt over a SHA-256 pre-hash.

bcrypt ignores input past 72 bytes; the base64 SHA-256 digest is 44 bytes, so
long passphrases are compared in full.
"""

from __future__ import annotations

import base64
import hashlib

import bcrypt

MIN_PASSWORD_LENGTH = 8


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bool(bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8")))
    except (ValueError, TypeError):
        return False


def is_password_strong(password: str) -> bool:
    """At least 8 characters with an upper, a lower, a digit and a symbol."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return False
    return (
        any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
        and any(not c.isalnum() for c in password)
    )
