from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from support_router.domain.value_objects.enums import Availability, ParticipantRole


@dataclass(frozen=True, slots=True)
class Participant:
    id: int
    display_name: str | None
    role: ParticipantRole
    availability: Availability
    created_at: datetime
    supported_languages: frozenset[str] = field(default_factory=frozenset)
    selected_language: str | None = None

    @property
    def is_operator(self) -> bool:
        return self.role == ParticipantRole.OPERATOR

    @property
    def is_available(self) -> bool:
        return self.availability == Availability.AVAILABLE

    def supports(self, language: str | None) -> bool:
        return language is not None and language in self.supported_languages
