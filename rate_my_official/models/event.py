"""Event models."""

import datetime as dt
import re

from pydantic import BaseModel, Field, field_validator


class EventOfficialAssignment(BaseModel):
    """An official working an event, with an optional role such as 'Head Referee'."""

    official_id: int
    role: str | None = None


class EventBase(BaseModel):
    """Descriptive fields of an event."""

    name: str = Field(..., min_length=1, description="Event name")
    date: dt.date = Field(..., description="Day the event takes place")
    start_time: str | None = Field(None, description="Start time as HH:MM")
    venue: str = Field(..., min_length=1, description="Venue name")
    description: str | None = Field(None, description="Free-text description")
    event_type: str = Field(..., min_length=1, description="e.g. 'Dual Meet', 'Tournament'")
    host: str = Field(..., min_length=1, description="Hosting school or organisation")

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str | None) -> str | None:
        if v is not None and not re.match(r"^([01]\d|2[0-3]):[0-5]\d$", v):
            raise ValueError(f"start_time must be 'HH:MM', got '{v}'")
        return v


class EventCreate(EventBase):
    """Model for creating or replacing an event together with its assignments."""

    officials: list[EventOfficialAssignment] = Field(default_factory=list)
    teams: list[int] = Field(default_factory=list, description="Team IDs taking part")

    @field_validator("officials")
    @classmethod
    def validate_unique_officials(
        cls, v: list[EventOfficialAssignment]
    ) -> list[EventOfficialAssignment]:
        ids = [a.official_id for a in v]
        if len(ids) != len(set(ids)):
            raise ValueError("an official can only be assigned to an event once")
        return v

    @field_validator("teams")
    @classmethod
    def dedupe_teams(cls, v: list[int]) -> list[int]:
        return list(dict.fromkeys(v))


class Event(EventBase):
    """Complete event model."""

    id: int

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class SearchFilters(BaseModel):
    """Optional narrowing applied on top of an event text search."""

    start_date: dt.date | None = None
    end_date: dt.date | None = None
    event_type: str | None = None
    venue: str | None = None
    host: str | None = None
