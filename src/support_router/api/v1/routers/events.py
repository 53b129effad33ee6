from __future__ import annotations

from fastapi import APIRouter

from support_router.api.deps import FacadeDep, UoWDep
from support_router.api.v1.schemas.event import DirectiveResponse, InboundEventRequest
from support_router.services import inbound_service

router = APIRouter(prefix="/api/v1/routing/events", tags=["events"])


@router.post("", response_model=list[DirectiveResponse])
async def handle_event(
    body: InboundEventRequest,
    facade: FacadeDep,
    uow: UoWDep,
) -> list[DirectiveResponse]:
    """Route one inbound chat event and return what the transport should send."""
    directives = await inbound_service.handle_inbound_event(body.to_dto(), facade, uow)
    return [DirectiveResponse.model_validate(d, from_attributes=True) for d in directives]
