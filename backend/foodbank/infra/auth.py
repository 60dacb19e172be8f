from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

ALGORITHM = "HS256"


def create_access_token(
    subject: str,
    secret: str,
    ttl_minutes: int,
) -> str:
    """Issue a token in the shape the hosted auth service signs.

    Production tokens come from the managed backend; this is used by tests and
    local tooling that share the same secret.
    """
    now = datetime.now(tz=timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> dict[str, Any]:
    return jwt.decode(
        token,
        secret,
        algorithms=[ALGORITHM],
        options={"require": ["sub", "exp"], "verify_aud": False},
    )
