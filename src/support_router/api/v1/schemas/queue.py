from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class QueueEntryResponse(BaseModel):
    customer_id: int
    language: str
    enqueued_at: datetime

    model_config = {"from_attributes": True}


class QueueResponse(BaseModel):
    length: int
    head: QueueEntryResponse | None = None
    entries: list[QueueEntryResponse]
