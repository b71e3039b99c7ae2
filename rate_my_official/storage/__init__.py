"""Repositories for officials, events, teams and users."""

from rate_my_official.storage.events import EventRepository
from rate_my_official.storage.officials import OfficialRepository
from rate_my_official.storage.teams import TeamRepository
from rate_my_official.storage.users import UserRepository

__all__ = ["EventRepository", "OfficialRepository", "TeamRepository", "UserRepository"]
