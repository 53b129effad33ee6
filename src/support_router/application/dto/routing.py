from __future__ import annotations

from dataclasses import dataclass

from support_router.domain.entities.participant import Participant
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import MenuKind


@dataclass(frozen=True, slots=True)
class SessionEnded:
    """Result of closing a session on behalf of one of its participants.

    follow_up is the session created when the freed operator was matched
    with the next queued customer.
    """

    session: SupportSession
    counterpart_id: int
    follow_up: SupportSession | None = None


@dataclass(frozen=True, slots=True)
class StartOutcome:
    menu: MenuKind
    ended: SessionEnded | None = None


@dataclass(frozen=True, slots=True)
class AvailabilityOutcome:
    """follow_up is set when going available immediately paired the operator."""

    follow_up: SupportSession | None = None


@dataclass(frozen=True, slots=True)
class Registration:
    operator: Participant
    follow_up: SupportSession | None = None
