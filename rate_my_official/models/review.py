"""Review models."""

import datetime as dt

from pydantic import BaseModel, Field

# Scored criteria, in display order.
CATEGORIES: tuple[str, ...] = (
    "mechanics",
    "professionalism",
    "positioning",
    "stalling",
    "consistency",
    "appearance",
)


class ReviewScores(BaseModel):
    """The six 1-5 category scores of a review."""

    mechanics: int = Field(..., ge=1, le=5)
    professionalism: int = Field(..., ge=1, le=5)
    positioning: int = Field(..., ge=1, le=5)
    stalling: int = Field(..., ge=1, le=5)
    consistency: int = Field(..., ge=1, le=5)
    appearance: int = Field(..., ge=1, le=5)

    def scores(self) -> dict[str, int]:
        return {category: getattr(self, category) for category in CATEGORIES}


class ReviewCreate(ReviewScores):
    """Review form input. The official and reviewer come from the request context."""

    event_id: int
    comment: str | None = Field(None, description="Optional free-text comment")
    is_anonymous: bool = False


class Review(ReviewScores):
    """A persisted review row."""

    id: int
    official_id: int
    user_id: int
    event_id: int
    comment: str = ""
    created_at: dt.datetime
    is_reported: bool = False
    is_anonymous: bool = False

    class Config:
        """Pydantic configuration."""

        from_attributes = True


class ReviewerSummary(BaseModel):
    first_name: str
    last_name: str
    user_type: str
    photo_url: str | None = None


class EventSummary(BaseModel):
    name: str
    date: dt.date


class ReviewWithDetails(Review):
    """A review joined with its reviewer and event, as shown on an official's page."""

    user: ReviewerSummary
    event: EventSummary

    @property
    def reviewer_display_name(self) -> str:
        if self.is_anonymous:
            return "Anonymous"
        return f"{self.user.first_name} {self.user.last_name}"
