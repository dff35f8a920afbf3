"""
Leaderboard API endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from users.dependencies import get_user_repository
from users.repository import UserRepository

from . import schemas, service

router = APIRouter()


@router.get("/leaderboard", response_model=schemas.LeaderboardResponse)
async def get_leaderboard(
    repo: UserRepository = Depends(get_user_repository),
) -> schemas.LeaderboardResponse:
    return await service.build_leaderboard(repo)
