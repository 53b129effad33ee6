from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from support_router.domain.value_objects.enums import SessionStatus


class SessionResponse(BaseModel):
    id: UUID
    customer_id: int
    operator_id: int
    status: SessionStatus
    created_at: datetime
    closed_at: datetime | None

    model_config = {"from_attributes": True}
