from __future__ import annotations

import base64
import hashlib
import secrets
import string
import uuid
from functools import lru_cache

import bcrypt

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(length: int = 15) -> str:
    """Random lowercase alphanumeric id (user and session ids)."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def new_uuid() -> str:
    return str(uuid.uuid4())


def _pw_prehash(pw: str) -> bytes:
    """Pre-hash so passwords longer than bcrypt's 72-byte input are not truncated."""
    # base64 keeps the digest free of NUL bytes and under 72 bytes
    return base64.b64encode(hashlib.sha256(pw.encode("utf-8")).digest())


def hash_password(pw: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_pw_prehash(pw), salt).decode("utf-8")


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_prehash(pw), pw_hash.encode("utf-8"))
    except ValueError:
        # malformed / non-bcrypt hash
        return False


@lru_cache(maxsize=4)
def dummy_hash(rounds: int = 12) -> str:
    """Hash of a random secret, checked when the account does not exist so that
    unknown emails cost as much as wrong passwords."""
    return hash_password(secrets.token_urlsafe(32), rounds)
