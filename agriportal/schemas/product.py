from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: int = Field(default=0, ge=0)
    category: str = Field(min_length=1, max_length=100)
    image_url: str | None = None
    contact: str = Field(min_length=1, max_length=100)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: int | None = Field(default=None, ge=0)
    category: str | None = None
    image_url: str | None = None
    contact: str | None = None


class ProductOut(BaseModel):
    id: int
    user_id: int
    name: str
    description: str
    price: int
    category: str
    image_url: str | None = None
    contact: str
    views_count: int
    created_at: datetime
    updated_at: datetime

    seller_username: str | None = None
    formatted_price: str | None = None
    zalo_link: str | None = None

    model_config = ConfigDict(from_attributes=True)
