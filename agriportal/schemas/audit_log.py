import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class AuditLogOut(BaseModel):
    id: int
    user_id: int | None
    action: str
    entity: str
    entity_id: str
    details: dict[str, Any] | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("details", mode="before")
    @classmethod
    def parse_details(cls, v):
        # Stored as JSON text
        if isinstance(v, str):
            return json.loads(v)
        return v


class AuditLogPage(BaseModel):
    items: list[AuditLogOut]
    total: int
