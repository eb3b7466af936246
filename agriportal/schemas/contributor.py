from pydantic import BaseModel


class ContributorOut(BaseModel):
    user_id: int
    username: str
    avatar_url: str | None = None
    points: int
    posts_count: int = 0
    products_count: int = 0
    comments_count: int = 0
    likes_received: int = 0


class UserRank(BaseModel):
    rank: int | None
    points: int
    total_contributors: int
