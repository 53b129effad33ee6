from __future__ import annotations

from typing import Protocol

from support_router.domain.entities.participant import Participant
from support_router.domain.value_objects.enums import Availability


class ParticipantReader(Protocol):
    async def get_by_id(self, participant_id: int) -> Participant | None: ...

    async def list_operators_by_status_and_language(
        self, status: Availability, language: str,
    ) -> list[Participant]:
        """Operators in the given status supporting language, oldest-registered first."""
        ...


class ParticipantWriter(Protocol):
    async def save(self, participant: Participant) -> Participant:
        """Insert or update by id."""
        ...
