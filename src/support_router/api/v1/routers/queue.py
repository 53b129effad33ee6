from __future__ import annotations

from fastapi import APIRouter

from support_router.api.deps import UoWDep
from support_router.api.v1.schemas.queue import QueueEntryResponse, QueueResponse

router = APIRouter(prefix="/api/v1/routing/queue", tags=["queue"])


@router.get("", response_model=QueueResponse)
async def get_queue(uow: UoWDep) -> QueueResponse:
    """Read-only snapshot of the waiting queue."""
    entries = await uow.queue.list_entries()
    head = await uow.queue.peek_first()
    return QueueResponse(
        length=len(entries),
        head=QueueEntryResponse.model_validate(head, from_attributes=True) if head else None,
        entries=[QueueEntryResponse.model_validate(e, from_attributes=True) for e in entries],
    )
