"""Team models."""

from datetime import datetime

from pydantic import BaseModel, Field


class TeamCreate(BaseModel):
    """Model for creating a team."""

    name: str = Field(..., min_length=1, description="Team or school name")


class Team(TeamCreate):
    """Complete team model."""

    id: int
    created_at: datetime

    class Config:
        """Pydantic configuration."""

        from_attributes = True
