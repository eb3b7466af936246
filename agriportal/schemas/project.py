from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, field_serializer
from typing import Literal

ProjectStatusLiteral = Literal["pending", "active", "funded", "completed", "cancelled"]


class ProjectCreate(BaseModel):
    # Positivity and presence are checked by ProjectService with localized messages
    title: str
    description: str
    funding_goal: int
    farmers_impacted: int
    area: str
    image_url: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class ProjectUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    funding_goal: int | None = None
    farmers_impacted: int | None = None
    area: str | None = None
    image_url: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: ProjectStatusLiteral | None = None


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatusLiteral


class ProjectOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    funding_goal: int
    current_funding: int
    farmers_impacted: int
    area: str
    status: str
    image_url: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_date", "end_date", mode="plain")
    def serialize_dates(self, v: date | None) -> str | None:
        if v is None:
            return None
        if isinstance(v, datetime):
            return v.date().isoformat()
        return v.isoformat()


class ProjectWithStats(ProjectOut):
    creator_username: str | None = None
    investors_count: int = 0
    progress_percentage: float = 0.0
