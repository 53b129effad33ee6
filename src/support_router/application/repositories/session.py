from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import ParticipantRole, SessionStatus


class SessionReader(Protocol):
    async def get_by_id(self, session_id: UUID) -> SupportSession | None: ...

    async def find_by_participant_role_and_status(
        self,
        participant_id: int,
        role: ParticipantRole,
        status: SessionStatus,
    ) -> list[SupportSession]:
        """Sessions where participant plays role, ordered by created_at ascending."""
        ...


class SessionWriter(Protocol):
    async def create(self, session: SupportSession) -> SupportSession: ...

    async def close(self, session_id: UUID, closed_at: datetime) -> None: ...
