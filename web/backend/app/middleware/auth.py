"""Caller identity — FastAPI dependencies for the invoking principal.

The hosting environment (an API gateway or session layer)
authenticates the caller and forwards the identity in the ``X-Identity``
header. Read-only endpoints work without it.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status


async def get_caller(
    x_identity: Optional[str] = Header(None, alias="X-Identity"),
) -> str:
    """FastAPI dependency returning the caller identity, unchanged.

    Raises ``401 Unauthorized`` if no identity was supplied.
    """
    if x_identity and x_identity.strip():
        return x_identity
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Missing caller identity",
        headers={"WWW-Authenticate": "X-Identity"},
    )
