from __future__ import annotations

from support_router.application.exceptions import InvalidOperationError
from support_router.domain.entities.participant import Participant


def assert_customer(participant: Participant) -> None:
    if participant.is_operator:
        raise InvalidOperationError("Operators cannot select a language")
