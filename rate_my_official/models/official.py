"""Official models."""

from pydantic import BaseModel, Field


class OfficialBase(BaseModel):
    """Identity fields an administrator maintains for an official."""

    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")
    age: int = Field(..., ge=0, le=120, description="Age in years")
    location: str = Field(..., min_length=1, description="Home city or region")
    association: str = Field(..., min_length=1, description="Officiating association")
    years_experience: int = Field(..., ge=0, description="Years officiating")
    photo_url: str | None = Field(None, description="Profile photo URL")


class OfficialCreate(OfficialBase):
    """Model for creating an official. Rating caches are never accepted as input."""

    pass


class OfficialUpdate(BaseModel):
    """Partial update of an official's identity fields."""

    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)
    age: int | None = Field(None, ge=0, le=120)
    location: str | None = Field(None, min_length=1)
    association: str | None = Field(None, min_length=1)
    years_experience: int | None = Field(None, ge=0)
    photo_url: str | None = None


class Official(OfficialBase):
    """Complete official model, including the cached rating fields."""

    id: int
    average_rating: int = Field(default=0, ge=0, le=5, description="Cached overall rating")
    total_reviews: int = Field(default=0, ge=0, description="Cached review count")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    class Config:
        """Pydantic configuration."""

        from_attributes = True
