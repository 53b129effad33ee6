from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from support_router.domain.value_objects.enums import SessionStatus


@dataclass(frozen=True, slots=True)
class SupportSession:
    id: UUID
    customer_id: int
    operator_id: int
    status: SessionStatus
    created_at: datetime
    closed_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def involves(self, participant_id: int) -> bool:
        return participant_id in (self.customer_id, self.operator_id)

    def counterpart_of(self, participant_id: int) -> int:
        """Return the other side of the pairing."""
        if participant_id == self.customer_id:
            return self.operator_id
        if participant_id == self.operator_id:
            return self.customer_id
        raise ValueError(f"Participant {participant_id} is not part of session {self.id}")
