from datetime import datetime
from pydantic import BaseModel, ConfigDict


class RatingInput(BaseModel):
    rating: int
    review: str | None = None


class RatingOut(BaseModel):
    id: int
    project_id: int
    user_id: int
    rating: int
    review: str | None = None
    created_at: datetime
    updated_at: datetime
    username: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RatingStats(BaseModel):
    avg_rating: float = 0.0
    total_ratings: int = 0
    rating_score: float = 0.0


class RatingPage(BaseModel):
    items: list[RatingOut]
    total: int
    page: int
    page_size: int


class CanRate(BaseModel):
    can_rate: bool


class LeaderboardProject(BaseModel):
    project_id: int
    title: str
    creator_username: str | None = None
    avg_rating: float
    total_ratings: int
    funding_progress: float
    rating_score: float
