"""Single entry point used by transport code to drive the routing engine."""
from __future__ import annotations

import logging

from support_router.application.dto.routing import (
    AvailabilityOutcome,
    Registration,
    SessionEnded,
    StartOutcome,
)
from support_router.application.exceptions import ConflictError
from support_router.application.uow import UnitOfWork
from support_router.domain.entities.participant import Participant
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import Availability, MenuKind
from support_router.services import directory_service, session_service
from support_router.services.matching_engine import MatchingEngine

logger = logging.getLogger(__name__)


class RoutingFacade:
    def __init__(self, engine: MatchingEngine) -> None:
        self._engine = engine

    @property
    def engine(self) -> MatchingEngine:
        return self._engine

    async def on_contact(
        self,
        participant_id: int,
        display_name: str | None,
        uow: UnitOfWork,
    ) -> Participant:
        async with self._engine.transaction(uow):
            return await directory_service.resolve_or_create(
                participant_id, display_name, self._engine.now(), uow,
            )

    async def on_register_operator(
        self,
        participant: Participant,
        languages: str | list[str],
        uow: UnitOfWork,
    ) -> Registration:
        """Register as operator and serve any queued customer in their languages."""
        async with self._engine.transaction(uow):
            participant = await directory_service.get_participant(participant.id, uow)
            operator = await directory_service.register_operator(participant, languages, uow)
            follow_up = None
            if operator.is_available:
                follow_up = await self._engine.free_and_advance(operator, uow)
                operator = await directory_service.get_participant(operator.id, uow)
            return Registration(operator=operator, follow_up=follow_up)

    async def on_start(self, participant: Participant, uow: UnitOfWork) -> StartOutcome:
        async with self._engine.transaction(uow):
            participant = await directory_service.get_participant(participant.id, uow)
            ended = await self._end_active(participant, uow)
            menu = MenuKind.OPERATOR if participant.is_operator else MenuKind.CUSTOMER
            return StartOutcome(menu=menu, ended=ended)

    async def on_select_language(
        self,
        participant: Participant,
        language: str,
        uow: UnitOfWork,
    ) -> Participant | None:
        async with self._engine.transaction(uow):
            participant = await directory_service.get_participant(participant.id, uow)
            return await self._engine.select_language(participant, language, uow)

    async def on_stop(self, participant: Participant, uow: UnitOfWork) -> SessionEnded | None:
        """End the participant's session. None means there was no active session."""
        async with self._engine.transaction(uow):
            return await self._end_active(participant, uow)

    async def on_set_availability(
        self,
        participant: Participant,
        availability: Availability,
        uow: UnitOfWork,
    ) -> AvailabilityOutcome:
        async with self._engine.transaction(uow):
            participant = await directory_service.get_participant(participant.id, uow)
            if not participant.is_operator:
                return AvailabilityOutcome()
            if availability == Availability.BUSY:
                await directory_service.set_availability(participant, availability, uow)
                return AvailabilityOutcome()

            if await session_service.find_active_for(participant.id, uow) is not None:
                raise ConflictError("Finish the current session before going available")
            follow_up = await self._engine.free_and_advance(participant, uow)
            return AvailabilityOutcome(follow_up=follow_up)

    async def resolve_forward_target(
        self,
        participant: Participant,
        uow: UnitOfWork,
    ) -> Participant | None:
        """Counterpart of the participant's active session, if any."""
        session = await session_service.find_active_for(participant.id, uow)
        if session is None:
            return None
        return await directory_service.get_participant(session.counterpart_of(participant.id), uow)

    async def active_session(self, participant: Participant, uow: UnitOfWork) -> SupportSession | None:
        return await session_service.find_active_for(participant.id, uow)

    async def _end_active(self, participant: Participant, uow: UnitOfWork) -> SessionEnded | None:
        session = await session_service.find_active_for(participant.id, uow)
        if session is None:
            return None
        follow_up = await self._engine.end_session(session, uow)
        logger.info("Participant %s ended session %s", participant.id, session.id)
        return SessionEnded(
            session=session,
            counterpart_id=session.counterpart_of(participant.id),
            follow_up=follow_up,
        )
