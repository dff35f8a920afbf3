"""
User repository dependency for FastAPI routes.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from .repository import UserRepository


async def get_user_repository(request: Request) -> UserRepository:
    repo = getattr(request.app.state, "user_repository", None)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server initialization error",
        )
    return repo
