"""Pydantic models for data validation."""

from rate_my_official.models.event import (
    Event,
    EventCreate,
    EventOfficialAssignment,
    SearchFilters,
)
from rate_my_official.models.official import Official, OfficialCreate, OfficialUpdate
from rate_my_official.models.rating import CategoryAverages
from rate_my_official.models.review import (
    CATEGORIES,
    EventSummary,
    Review,
    ReviewCreate,
    ReviewerSummary,
    ReviewScores,
    ReviewWithDetails,
)
from rate_my_official.models.team import Team, TeamCreate
from rate_my_official.models.user import User, UserCreate, UserProfileUpdate

__all__ = [
    "CATEGORIES",
    "CategoryAverages",
    "Event",
    "EventCreate",
    "EventOfficialAssignment",
    "EventSummary",
    "Official",
    "OfficialCreate",
    "OfficialUpdate",
    "Review",
    "ReviewCreate",
    "ReviewScores",
    "ReviewWithDetails",
    "ReviewerSummary",
    "SearchFilters",
    "Team",
    "TeamCreate",
    "User",
    "UserCreate",
    "UserProfileUpdate",
]
