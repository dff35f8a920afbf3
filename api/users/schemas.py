"""
User API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class CreateUserRequest(BaseModel):
    # Missing name and score take their zero values; email is the key.
    name: str = Field(default="", max_length=200)
    email: str = Field(..., min_length=1, max_length=320)
    score: int = Field(default=0, strict=True, ge=INT32_MIN, le=INT32_MAX)


class UpdateScoreRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    score: int = Field(..., strict=True, ge=INT32_MIN, le=INT32_MAX)
    # Unknown decades are accepted and ignored by the update.
    decade: str | None = Field(default=None, max_length=20)


class UserResponse(BaseModel):
    name: str
    email: str
    score: int
    d1950: int = 0
    d1960: int = 0
    d1970: int = 0
    d1980: int = 0
    d1990: int = 0
    d2000: int = 0
    d2010: int = 0
    d2020: int = 0
