"""
Leaderboard API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from users.schemas import UserResponse


class LeaderboardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    overall: list[UserResponse]
    # Decades whose query failed are absent.
    by_decade: dict[str, list[UserResponse]] = Field(default_factory=dict, alias="byDecade")
