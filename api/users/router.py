"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from . import schemas, service
from .dependencies import get_user_repository
from .repository import UserRepository

router = APIRouter()


@router.get("/user")
async def get_users(
    email: str | None = Query(default=None, max_length=320),
    repo: UserRepository = Depends(get_user_repository),
) -> schemas.UserResponse | list[schemas.UserResponse]:
    """
    One user when `email` is given, otherwise the top users by score.
    """
    if email:
        return await service.find_by_email(repo, email)
    return await service.list_top_by_score(repo)


@router.post("/user")
async def register_user(
    payload: schemas.CreateUserRequest,
    response: Response,
    repo: UserRepository = Depends(get_user_repository),
) -> schemas.UserResponse:
    user, created = await service.find_or_create(repo, payload)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return user


@router.patch("/user")
async def update_user_score(
    payload: schemas.UpdateScoreRequest,
    repo: UserRepository = Depends(get_user_repository),
) -> schemas.UserResponse:
    return await service.update_score(repo, payload)
