"""
Leaderboard aggregation.

Flow:
1) Top users overall by score
2) Top users per decade: counter > 0, ordered by counter then overall score
3) Combine into one response

The per-decade queries degrade independently: a failed decade is logged and
left out of the response. Only a failed overall query fails the request.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import HTTPException, status

from core import db
from users import service as user_service
from users.decades import DECADE_COLUMNS, DECADES
from users.query import Condition, QuerySpec
from users.repository import UserRepository
from users.schemas import UserResponse

from . import schemas

logger = logging.getLogger(__name__)

LEADERBOARD_LIMIT = 5


def overall_query(limit: int = LEADERBOARD_LIMIT) -> QuerySpec:
    return QuerySpec(order_by=(("score", "DESC"),), limit=limit)


def decade_query(decade: str, limit: int = LEADERBOARD_LIMIT) -> QuerySpec:
    column = DECADE_COLUMNS[decade]
    return QuerySpec(
        where=(Condition(column, ">", 0),),
        order_by=((column, "DESC"), ("score", "DESC")),
        limit=limit,
    )


async def _top_for_decade(repo: UserRepository, decade: str) -> list[UserResponse] | None:
    try:
        rows = await repo.find(decade_query(decade))
    except db.StoreError:
        logger.warning("leaderboard_decade_skipped decade=%s", decade, exc_info=True)
        return None
    return [user_service.to_user_response(row) for row in rows]


async def build_leaderboard(repo: UserRepository) -> schemas.LeaderboardResponse:
    overall_task = repo.find(overall_query())
    decade_tasks = [_top_for_decade(repo, decade) for decade in DECADES]
    results = await asyncio.gather(overall_task, *decade_tasks, return_exceptions=True)

    overall_rows, decade_results = results[0], results[1:]
    if isinstance(overall_rows, db.StoreError):
        logger.error("leaderboard_overall_failed", exc_info=overall_rows)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error.",
        )
    if isinstance(overall_rows, BaseException):
        raise overall_rows

    by_decade: dict[str, list[UserResponse]] = {}
    for decade, result in zip(DECADES, decade_results):
        if isinstance(result, BaseException):
            raise result
        if result is not None:
            by_decade[decade] = result

    return schemas.LeaderboardResponse(
        overall=[user_service.to_user_response(row) for row in overall_rows],
        by_decade=by_decade,
    )
