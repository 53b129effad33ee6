from __future__ import annotations

from typing import Protocol

from support_router.application.repositories.outbox import OutboxWriter
from support_router.application.repositories.participant import (
    ParticipantReader,
    ParticipantWriter,
)
from support_router.application.repositories.session import SessionReader, SessionWriter
from support_router.application.repositories.waiting_queue import WaitingQueue


class UnitOfWork(Protocol):
    participants: ParticipantReader
    participants_w: ParticipantWriter
    sessions: SessionReader
    sessions_w: SessionWriter
    queue: WaitingQueue
    outbox: OutboxWriter

    async def begin(self) -> None:
        """Called once the engine lock is held; discard any state cached before it."""
        ...

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
