"""
Shared route dependencies.
"""
from fastapi import HTTPException, Request, status
from tripsettle.core.config import settings


def get_current_owner_id(request: Request) -> int:
    """
    Owner id of the authenticated caller.

    Authentication happens upstream; the gateway forwards the owner id in a
    header. Every query below is scoped to it.
    """
    raw = request.headers.get(settings.OWNER_HEADER)
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid owner id"
        )
