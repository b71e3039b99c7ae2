"""User models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

UserType = Literal["Coach", "Regional Supervisor"]


class UserBase(BaseModel):
    """Profile fields shared by coaches and regional supervisors."""

    email: str = Field(..., description="Login email, stored lower-case")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    user_type: UserType
    school: str | None = Field(None, description="Coaches only")
    years_coaching: int | None = Field(None, ge=0, description="Coaches only")
    region: str | None = Field(None, description="Supervisors, and coaches managed by one")
    years_experience: int | None = Field(None, ge=0, description="Supervisors only")
    photo_url: str | None = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError(f"invalid email address '{v}'")
        return v


class UserCreate(UserBase):
    """Model for registering a user. Accounts start unverified."""

    role: Literal["user", "admin"] = "user"

    @model_validator(mode="after")
    def require_school_for_coaches(self) -> "UserCreate":
        if self.user_type == "Coach" and not self.school:
            raise ValueError("School is required for coaches")
        return self


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)
    school: str | None = None
    years_coaching: int | None = Field(None, ge=0)
    region: str | None = None
    years_experience: int | None = Field(None, ge=0)
    photo_url: str | None = None


class User(UserBase):
    """Complete user model."""

    id: int
    role: Literal["user", "admin"] = "user"
    is_verified: bool = False
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_supervisor(self) -> bool:
        return self.user_type == "Regional Supervisor"

    @property
    def can_moderate(self) -> bool:
        """Admins and regional supervisors may delete reviews, officials and events."""
        return self.is_admin or self.is_supervisor

    class Config:
        """Pydantic configuration."""

        from_attributes = True
