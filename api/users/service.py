"""
User record business logic.

Store failures are logged here with detail and reported to callers as a
generic 500; lookups that match nothing are reported as a structured 404.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core import db

from . import decades, schemas
from .query import RECORD_COLUMNS, QuerySpec
from .repository import UserRepository

logger = logging.getLogger(__name__)

TOP_USERS_LIMIT = 50


def to_user_response(row: dict) -> schemas.UserResponse:
    values = {column: row[column] for column in RECORD_COLUMNS}
    return schemas.UserResponse(**values)


def _not_found(email: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "message": "User not found.", "email": email},
    )


def _database_error(event: str, **fields: object) -> HTTPException:
    # Must be called from inside an `except` block so the traceback is logged.
    details = " ".join(f"{k}={v}" for k, v in fields.items())
    logger.exception("%s %s", event, details)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database error.",
    )


async def find_by_email(repo: UserRepository, email: str) -> schemas.UserResponse:
    if not (email or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="email is required.",
        )

    try:
        row = await repo.find_by_email(email)
    except db.StoreError as exc:
        raise _database_error("user_lookup_failed", email=email) from exc

    if row is None:
        raise _not_found(email)
    return to_user_response(row)


async def find_or_create(
    repo: UserRepository,
    payload: schemas.CreateUserRequest,
) -> tuple[schemas.UserResponse, bool]:
    """
    Return the existing record for `payload.email` unchanged, or insert a new
    one with every decade counter at zero. The second element tells whether
    the record was created.

    The lookup and the insert are separate statements, so two concurrent
    first registrations for one email can both insert.
    """
    try:
        existing = await repo.find_by_email(payload.email)
        if existing is not None:
            return to_user_response(existing), False

        row = await repo.insert(name=payload.name, email=payload.email, score=payload.score)
    except db.StoreError as exc:
        raise _database_error("user_register_failed", email=payload.email) from exc

    logger.info("user_created email=%s score=%s", payload.email, payload.score)
    return to_user_response(row), True


async def list_top_by_score(repo: UserRepository, limit: int = TOP_USERS_LIMIT) -> list[schemas.UserResponse]:
    try:
        rows = await repo.find(QuerySpec(order_by=(("score", "DESC"),), limit=limit))
    except db.StoreError as exc:
        raise _database_error("user_list_failed", limit=limit) from exc
    return [to_user_response(row) for row in rows]


async def update_score(repo: UserRepository, payload: schemas.UpdateScoreRequest) -> schemas.UserResponse:
    column = decades.column_for(payload.decade)
    if payload.decade is not None and column is None:
        logger.info("decade_ignored email=%s decade=%s", payload.email, payload.decade)

    try:
        row = await repo.update_score(email=payload.email, score=payload.score, decade_column=column)
    except db.StoreError as exc:
        raise _database_error("user_update_failed", email=payload.email) from exc

    if row is None:
        raise _not_found(payload.email)

    logger.info("score_updated email=%s score=%s decade_column=%s", payload.email, payload.score, column)
    return to_user_response(row)
