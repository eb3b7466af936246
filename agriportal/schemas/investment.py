from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from typing import Literal


class InvestmentCreate(BaseModel):
    amount: int | None = None
    investor_name: str | None = None
    investor_email: EmailStr | None = None
    investor_phone: str | None = None
    message: str | None = None

    @field_validator("investor_email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, v):
        # Missing contact fields are reported by the service, not as a format error
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InvestmentStatusUpdate(BaseModel):
    status: Literal["pending", "confirmed", "cancelled"]


class InvestmentOut(BaseModel):
    id: int
    project_id: int
    investor_id: int
    amount: int
    investor_name: str
    investor_email: str
    investor_phone: str | None = None
    message: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvestmentWithProject(InvestmentOut):
    project_title: str | None = None
