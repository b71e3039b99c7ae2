"""Derived rating models."""

from pydantic import BaseModel, Field


class CategoryAverages(BaseModel):
    """Per-category rounded means of an official's reviews, plus the overall score.

    ``overall`` is the rounded mean of the six already-rounded category means.
    Every field is 0 when the official has no reviews.
    """

    mechanics: int = Field(default=0, ge=0, le=5)
    professionalism: int = Field(default=0, ge=0, le=5)
    positioning: int = Field(default=0, ge=0, le=5)
    stalling: int = Field(default=0, ge=0, le=5)
    consistency: int = Field(default=0, ge=0, le=5)
    appearance: int = Field(default=0, ge=0, le=5)
    overall: int = Field(default=0, ge=0, le=5)
