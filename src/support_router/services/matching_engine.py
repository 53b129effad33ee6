"""Pairs customers with operators and serves the waiting queue.

Every public method must run inside :meth:`MatchingEngine.transaction`, which
serializes all matching decisions behind one lock and commits (or rolls back)
the unit of work, including the waiting queue, as a single step.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import AsyncIterator, Callable

from support_router.application.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from support_router.application.policies.permissions import assert_customer
from support_router.application.uow import UnitOfWork
from support_router.domain.entities.participant import Participant
from support_router.domain.entities.queue_entry import QueueEntry
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import Availability
from support_router.domain.value_objects.languages import normalize_language
from support_router.services import directory_service, session_service

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MatchingEngine:
    def __init__(
        self,
        *,
        clear_language_on_session_end: bool = False,
        clock: Clock | None = None,
    ) -> None:
        self._lock = asyncio.Lock()
        self._clock = clock or utc_now
        self._clear_language_on_session_end = clear_language_on_session_end

    def now(self) -> datetime:
        return self._clock()

    @asynccontextmanager
    async def transaction(self, uow: UnitOfWork) -> AsyncIterator[UnitOfWork]:
        async with self._lock:
            try:
                await uow.begin()
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    def _require_transaction(self) -> None:
        if not self._lock.locked():
            raise RuntimeError("MatchingEngine calls must run inside engine.transaction()")

    async def find_operator(self, language: str, uow: UnitOfWork) -> Participant | None:
        """Earliest-registered available operator supporting language."""
        operators = await uow.participants.list_operators_by_status_and_language(
            Availability.AVAILABLE, language,
        )
        return operators[0] if operators else None

    async def select_language(
        self,
        customer: Participant,
        language: str,
        uow: UnitOfWork,
    ) -> Participant | None:
        """Record the customer's language and try to pair them.

        Returns the assigned operator, or None when the customer was queued.
        """
        self._require_transaction()
        assert_customer(customer)
        code = normalize_language(language)
        if not code:
            raise InvalidArgumentError("A language code is required")
        customer = await uow.participants_w.save(replace(customer, selected_language=code))
        return await self.assign(customer, uow)

    async def assign(self, customer: Participant, uow: UnitOfWork) -> Participant | None:
        self._require_transaction()
        language = customer.selected_language
        if language is None:
            return None

        if await session_service.find_active_for(customer.id, uow) is not None:
            raise ConflictError("You are already connected to an operator")

        operator = await self.find_operator(language, uow)
        if operator is None:
            await self._enqueue(customer, language, uow)
            return None

        await session_service.create(customer, operator, self._clock(), uow)
        operator = await directory_service.set_availability(operator, Availability.BUSY, uow)
        await uow.queue.remove(customer.id)
        logger.info(
            "Matched customer %s with operator %s (%s)",
            customer.id, operator.id, language,
        )
        return operator

    async def end_session(
        self,
        session: SupportSession,
        uow: UnitOfWork,
    ) -> SupportSession | None:
        """Close session and hand the freed operator the next queued customer.

        Returns the follow-up session, if one was created. No-op for closed sessions.
        """
        self._require_transaction()
        if not await session_service.close(session, self._clock(), uow):
            return None

        if self._clear_language_on_session_end:
            await directory_service.clear_selected_language(session.customer_id, uow)

        operator = await uow.participants.get_by_id(session.operator_id)
        if operator is None:
            raise NotFoundError(f"Operator {session.operator_id} not found")
        return await self.free_and_advance(operator, uow)

    async def free_and_advance(
        self,
        operator: Participant,
        uow: UnitOfWork,
    ) -> SupportSession | None:
        self._require_transaction()
        operator = await directory_service.set_availability(operator, Availability.AVAILABLE, uow)
        if not operator.is_operator:
            return None

        entry = await uow.queue.dequeue_first_matching(lambda e: operator.supports(e.language))
        if entry is None:
            return None

        customer = await uow.participants.get_by_id(entry.customer_id)
        if customer is None:
            raise NotFoundError(f"Queued customer {entry.customer_id} not found")

        session = await session_service.create(customer, operator, self._clock(), uow)
        await directory_service.set_availability(operator, Availability.BUSY, uow)
        logger.info(
            "Operator %s picked up queued customer %s (%s)",
            operator.id, customer.id, entry.language,
        )
        return session

    async def _enqueue(self, customer: Participant, language: str, uow: UnitOfWork) -> None:
        added = await uow.queue.enqueue(
            QueueEntry(customer_id=customer.id, language=language, enqueued_at=self._clock()),
        )
        if not added:
            return
        position = await uow.queue.position_of(customer.id)
        await uow.outbox.add(
            "routing.customer_queued",
            {"customer_id": customer.id, "language": language, "position": position},
        )
        logger.info(
            "No operator for %s, customer %s queued at position %s",
            language, customer.id, position,
        )
