"""Session store: customer/operator pairings and their active/closed status."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from support_router.application.exceptions import ConflictError, NotFoundError
from support_router.application.uow import UnitOfWork
from support_router.domain.entities.participant import Participant
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import ParticipantRole, SessionStatus

logger = logging.getLogger(__name__)


async def find_active_for(participant_id: int, uow: UnitOfWork) -> SupportSession | None:
    """Return the active session the participant takes part in, in either role.

    If the store holds more than one, the earliest-created wins.
    """
    sessions: list[SupportSession] = []
    for role in (ParticipantRole.CUSTOMER, ParticipantRole.OPERATOR):
        sessions.extend(
            await uow.sessions.find_by_participant_role_and_status(
                participant_id, role, SessionStatus.ACTIVE,
            )
        )
    if not sessions:
        return None
    return min(sessions, key=lambda s: s.created_at)


async def get_session(session_id: uuid.UUID, uow: UnitOfWork) -> SupportSession:
    session = await uow.sessions.get_by_id(session_id)
    if session is None:
        raise NotFoundError("Session not found")
    return session


async def create(
    customer: Participant,
    operator: Participant,
    now: datetime,
    uow: UnitOfWork,
) -> SupportSession:
    """Open an active session. Neither side may already be in one."""
    if customer.id == operator.id:
        raise ConflictError("A participant cannot be paired with itself")
    for participant in (customer, operator):
        if await find_active_for(participant.id, uow) is not None:
            raise ConflictError(f"Participant {participant.id} already has an active session")

    session = SupportSession(
        id=uuid.uuid4(),
        customer_id=customer.id,
        operator_id=operator.id,
        status=SessionStatus.ACTIVE,
        created_at=now,
    )
    session = await uow.sessions_w.create(session)
    await uow.outbox.add(
        "routing.session_started",
        {
            "session_id": str(session.id),
            "customer_id": customer.id,
            "operator_id": operator.id,
        },
    )
    logger.info(
        "Session %s started: customer=%s operator=%s",
        session.id, customer.id, operator.id,
    )
    return session


async def close(session: SupportSession, now: datetime, uow: UnitOfWork) -> bool:
    """Close an active session. Returns False when it was already closed."""
    current = await get_session(session.id, uow)
    if not current.is_active:
        return False

    await uow.sessions_w.close(current.id, now)
    await uow.outbox.add(
        "routing.session_closed",
        {
            "session_id": str(current.id),
            "customer_id": current.customer_id,
            "operator_id": current.operator_id,
        },
    )
    logger.info("Session %s closed", current.id)
    return True
