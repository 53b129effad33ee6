"""Participant directory: identity, role and availability of customers and operators."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from support_router.application.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from support_router.application.uow import UnitOfWork
from support_router.domain.entities.participant import Participant
from support_router.domain.value_objects.enums import Availability, ParticipantRole
from support_router.domain.value_objects.languages import parse_language_codes
from support_router.services import session_service

logger = logging.getLogger(__name__)


async def get_participant(participant_id: int, uow: UnitOfWork) -> Participant:
    participant = await uow.participants.get_by_id(participant_id)
    if participant is None:
        raise NotFoundError(f"Participant {participant_id} not found")
    return participant


async def resolve_or_create(
    participant_id: int,
    display_name: str | None,
    now: datetime,
    uow: UnitOfWork,
) -> Participant:
    """Return the known participant (refreshing its name) or register a new customer."""
    existing = await uow.participants.get_by_id(participant_id)
    if existing is not None:
        if display_name is not None and existing.display_name != display_name:
            existing = await uow.participants_w.save(
                replace(existing, display_name=display_name),
            )
        return existing

    participant = Participant(
        id=participant_id,
        display_name=display_name,
        role=ParticipantRole.CUSTOMER,
        availability=Availability.AVAILABLE,
        created_at=now,
    )
    participant = await uow.participants_w.save(participant)
    logger.info("Registered new participant %s", participant_id)
    return participant


async def register_operator(
    participant: Participant,
    languages: str | list[str] | set[str] | frozenset[str],
    uow: UnitOfWork,
) -> Participant:
    """Promote participant to operator with the given language set.

    The language set replaces any previous one. An operator that is in the
    middle of a session stays busy until that session ends.
    """
    codes = parse_language_codes(languages)
    if not codes:
        raise InvalidArgumentError("At least one language code is required")

    active = await session_service.find_active_for(participant.id, uow)
    if active is not None and active.customer_id == participant.id:
        raise ConflictError("End the current support session before registering as an operator")

    await uow.queue.remove(participant.id)

    availability = Availability.BUSY if active is not None else Availability.AVAILABLE
    operator = await uow.participants_w.save(
        replace(
            participant,
            role=ParticipantRole.OPERATOR,
            supported_languages=codes,
            selected_language=None,
            availability=availability,
        ),
    )
    logger.info(
        "Participant %s registered as operator for %s",
        operator.id,
        ", ".join(sorted(codes)),
    )
    return operator


async def set_availability(
    participant: Participant,
    value: Availability,
    uow: UnitOfWork,
) -> Participant:
    """Change an operator's availability. Customers are returned untouched."""
    if not participant.is_operator or participant.availability == value:
        return participant

    updated = await uow.participants_w.save(replace(participant, availability=value))
    await uow.outbox.add(
        "routing.operator_availability_changed",
        {"operator_id": updated.id, "availability": value.value},
    )
    logger.debug("Operator %s is now %s", updated.id, value)
    return updated


async def clear_selected_language(participant_id: int, uow: UnitOfWork) -> None:
    participant = await uow.participants.get_by_id(participant_id)
    if participant is None or participant.selected_language is None:
        return
    await uow.participants_w.save(replace(participant, selected_language=None))
