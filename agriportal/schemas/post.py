from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

PostCategoryLiteral = Literal["experience", "salinity-solution", "product"]


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    category: PostCategoryLiteral
    image_url: str | None = None
    product_link: str | None = None


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    category: PostCategoryLiteral | None = None
    image_url: str | None = None
    product_link: str | None = None


class PostOut(BaseModel):
    id: int
    user_id: int
    title: str
    content: str
    category: str
    image_url: str | None = None
    product_link: str | None = None
    views_count: int
    created_at: datetime
    updated_at: datetime

    author_username: str | None = None
    author_points: int = 0
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False

    model_config = ConfigDict(from_attributes=True)


class TrendingPost(PostOut):
    trending_score: float = 0.0


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    parent_comment_id: int | None = None


class CommentOut(BaseModel):
    id: int
    post_id: int
    user_id: int
    username: str | None = None
    content: str
    parent_comment_id: int | None = None
    created_at: datetime
    replies: list[CommentOut] = []

    model_config = ConfigDict(from_attributes=True)


class LikeState(BaseModel):
    liked: bool
    likes_count: int
CommentOut.model_rebuild()
