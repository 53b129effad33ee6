from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from support_router.api.v1.schemas.session import SessionResponse
from support_router.domain.entities.participant import Participant
from support_router.domain.value_objects.enums import Availability, ParticipantRole


class ParticipantResponse(BaseModel):
    id: int
    display_name: str | None
    role: ParticipantRole
    availability: Availability
    supported_languages: list[str]
    selected_language: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, participant: Participant) -> ParticipantResponse:
        return cls(
            id=participant.id,
            display_name=participant.display_name,
            role=participant.role,
            availability=participant.availability,
            supported_languages=sorted(participant.supported_languages),
            selected_language=participant.selected_language,
            created_at=participant.created_at,
        )


class RegisterOperatorRequest(BaseModel):
    languages: str | list[str]


class RegistrationResponse(BaseModel):
    operator: ParticipantResponse
    follow_up: SessionResponse | None = None


class AvailabilityRequest(BaseModel):
    availability: Availability


class AvailabilityResponse(BaseModel):
    follow_up: SessionResponse | None = None


class SelectLanguageRequest(BaseModel):
    language: str


class SelectLanguageResponse(BaseModel):
    operator: ParticipantResponse | None = None
    queue_position: int | None = None


class StopResponse(BaseModel):
    session: SessionResponse
    counterpart_id: int
    follow_up: SessionResponse | None = None
