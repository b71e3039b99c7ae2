"""RateMyOfficial - reviews and aggregate ratings for wrestling officials."""

__version__ = "0.1.0"
