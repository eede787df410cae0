"""Session identifier derivation."""

from __future__ import annotations

import hashlib
import hmac
import json

SESSION_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuv"
SESSION_ID_LENGTH = 32


def _to_base32(digest: bytes, length: int = SESSION_ID_LENGTH) -> str:
    value = int.from_bytes(digest, "big")
    chars = []
    for _ in range(length):
        value, remainder = divmod(value, 32)
        chars.append(SESSION_ID_ALPHABET[remainder])
    return "".join(reversed(chars))


def derive_session_id(
    tenant_id: str,
    username: str,
    token: str,
    *,
    alg: str = "sha256",
    secret_key: str | None = None,
) -> str:
    """Derive the stable session id for a principal on a tenant.

    The id is recomputed on every request and never stored. With a
    ``secret_key`` the digest is an HMAC, so ids cannot be recomputed by
    anyone who only knows the token.
    """

    serialized = json.dumps([tenant_id, username, token]).encode("utf-8")
    if secret_key is not None:
        digest = hmac.new(secret_key.encode("utf-8"), serialized, alg).digest()
    else:
        try:
            hasher = hashlib.new(alg)
        except ValueError as exc:  # pragma: no cover - guarded by settings
            raise ValueError(f"Unsupported hash algorithm: {alg}") from exc
        hasher.update(serialized)
        digest = hasher.digest()
    return _to_base32(digest)
