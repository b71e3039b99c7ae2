"""Review ledger and rating aggregation."""

from rate_my_official.ratings.exceptions import (
    DuplicateReviewError,
    DuplicateTeamError,
    EmailAlreadyRegisteredError,
    EventNotFoundError,
    NotFoundError,
    OfficialNotAssignedError,
    OfficialNotFoundError,
    RatingsError,
    ReviewNotFoundError,
    StorageError,
    TeamNotFoundError,
    TransientStorageError,
    UserNotFoundError,
)

__all__ = [
    "DuplicateReviewError",
    "DuplicateTeamError",
    "EmailAlreadyRegisteredError",
    "EventNotFoundError",
    "NotFoundError",
    "OfficialNotAssignedError",
    "OfficialNotFoundError",
    "RatingsError",
    "ReviewNotFoundError",
    "StorageError",
    "TeamNotFoundError",
    "TransientStorageError",
    "UserNotFoundError",
]
