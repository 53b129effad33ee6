from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from support_router.application.repositories.waiting_queue import WaitingQueue
from support_router.infrastructure.db.errors import storage_errors
from support_router.infrastructure.db.repositories.outbox import OutboxWriterRepo
from support_router.infrastructure.db.repositories.participant import (
    ParticipantReaderRepo,
    ParticipantWriterRepo,
)
from support_router.infrastructure.db.repositories.session import (
    SessionReaderRepo,
    SessionWriterRepo,
)
from support_router.infrastructure.db.repositories.waiting_queue import WaitingQueueRepo


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession.

    Pass ``queue`` to use an in-process waiting queue; otherwise the queue
    lives in the database alongside participants and sessions.
    """

    def __init__(self, session: AsyncSession, queue: WaitingQueue | None = None) -> None:
        self._session = session
        self.participants = ParticipantReaderRepo(session)
        self.participants_w = ParticipantWriterRepo(session)
        self.sessions = SessionReaderRepo(session)
        self.sessions_w = SessionWriterRepo(session)
        self.queue: WaitingQueue = queue if queue is not None else WaitingQueueRepo(session)
        self.outbox = OutboxWriterRepo(session)

    async def begin(self) -> None:
        # rows loaded before the lock was taken may have been changed by another request
        self._session.expire_all()

    async def flush(self) -> None:
        with storage_errors():
            await self._session.flush()

    async def commit(self) -> None:
        with storage_errors():
            await self._session.commit()
        self.queue.commit()

    async def rollback(self) -> None:
        self.queue.rollback()
        with storage_errors():
            await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
