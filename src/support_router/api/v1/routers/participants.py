from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from support_router.api.deps import FacadeDep, UoWDep
from support_router.api.v1.schemas.participant import (
    AvailabilityRequest,
    AvailabilityResponse,
    ParticipantResponse,
    RegisterOperatorRequest,
    RegistrationResponse,
    SelectLanguageRequest,
    SelectLanguageResponse,
    StopResponse,
)
from support_router.api.v1.schemas.session import SessionResponse
from support_router.domain.entities.session import SupportSession
from support_router.services import directory_service

router = APIRouter(prefix="/api/v1/routing/participants", tags=["participants"])


def _session(session: SupportSession | None) -> SessionResponse | None:
    if session is None:
        return None
    return SessionResponse.model_validate(session, from_attributes=True)


@router.get("/{participant_id}", response_model=ParticipantResponse)
async def get_participant(participant_id: int, uow: UoWDep) -> ParticipantResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    return ParticipantResponse.from_entity(participant)


@router.post("/{participant_id}/operator", response_model=RegistrationResponse)
async def register_operator(
    participant_id: int,
    body: RegisterOperatorRequest,
    facade: FacadeDep,
    uow: UoWDep,
) -> RegistrationResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    registration = await facade.on_register_operator(participant, body.languages, uow)
    return RegistrationResponse(
        operator=ParticipantResponse.from_entity(registration.operator),
        follow_up=_session(registration.follow_up),
    )


@router.put("/{participant_id}/availability", response_model=AvailabilityResponse)
async def set_availability(
    participant_id: int,
    body: AvailabilityRequest,
    facade: FacadeDep,
    uow: UoWDep,
) -> AvailabilityResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    outcome = await facade.on_set_availability(participant, body.availability, uow)
    return AvailabilityResponse(follow_up=_session(outcome.follow_up))


@router.post("/{participant_id}/language", response_model=SelectLanguageResponse)
async def select_language(
    participant_id: int,
    body: SelectLanguageRequest,
    facade: FacadeDep,
    uow: UoWDep,
) -> SelectLanguageResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    operator = await facade.on_select_language(participant, body.language, uow)
    if operator is not None:
        return SelectLanguageResponse(operator=ParticipantResponse.from_entity(operator))
    return SelectLanguageResponse(queue_position=await uow.queue.position_of(participant_id))


@router.post("/{participant_id}/stop", response_model=StopResponse)
async def stop_session(participant_id: int, facade: FacadeDep, uow: UoWDep) -> StopResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    ended = await facade.on_stop(participant, uow)
    if ended is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active session")
    return StopResponse(
        session=SessionResponse.model_validate(ended.session, from_attributes=True),
        counterpart_id=ended.counterpart_id,
        follow_up=_session(ended.follow_up),
    )


@router.get("/{participant_id}/session", response_model=SessionResponse)
async def get_active_session(participant_id: int, facade: FacadeDep, uow: UoWDep) -> SessionResponse:
    participant = await directory_service.get_participant(participant_id, uow)
    session = await facade.active_session(participant, uow)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active session")
    return SessionResponse.model_validate(session, from_attributes=True)
