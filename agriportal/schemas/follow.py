from datetime import datetime
from pydantic import BaseModel

from agriportal.schemas.project import ProjectOut
from agriportal.schemas.user import UserPublic


class FollowState(BaseModel):
    following: bool


class FollowStats(BaseModel):
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False
    is_followed_by: bool = False


class ProjectFollowStats(BaseModel):
    followers_count: int = 0
    is_following: bool = False


class FollowEntry(BaseModel):
    """A user in a follower or following list"""
    user: UserPublic
    followed_at: datetime


class FollowedProject(BaseModel):
    project: ProjectOut
    followed_at: datetime
