"""Domain-specific exceptions for review and rating operations."""


class RatingsError(Exception):
    """Base exception for review and rating failures."""

    pass


class DuplicateReviewError(RatingsError):
    """Raised when a user has already reviewed an official for an event."""

    def __init__(self, user_id: int, official_id: int, event_id: int):
        self.user_id = user_id
        self.official_id = official_id
        self.event_id = event_id
        super().__init__("You have already reviewed this official for this event")


class OfficialNotAssignedError(RatingsError):
    """Raised when a review targets an official who did not work the event."""

    def __init__(self, official_id: int, event_id: int):
        self.official_id = official_id
        self.event_id = event_id
        super().__init__("This official was not assigned to this event")


class EmailAlreadyRegisteredError(RatingsError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")


class DuplicateTeamError(RatingsError):
    """Raised when a team name is already taken by another team."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Team '{name}' already exists")


class NotFoundError(RatingsError):
    """Raised when a referenced row does not exist."""

    entity = "Record"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class ReviewNotFoundError(NotFoundError):
    entity = "Review"


class OfficialNotFoundError(NotFoundError):
    entity = "Official"


class EventNotFoundError(NotFoundError):
    entity = "Event"


class UserNotFoundError(NotFoundError):
    entity = "User"


class TeamNotFoundError(NotFoundError):
    entity = "Team"


class StorageError(RatingsError):
    """Raised when a database operation fails."""

    pass


class TransientStorageError(StorageError):
    """Raised when the database is locked or busy; the caller may retry."""

    pass
