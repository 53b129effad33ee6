"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends

from support_router.config import settings
from support_router.infrastructure.db.session import AsyncSessionLocal
from support_router.infrastructure.db.uow import SqlAlchemyUoW
from support_router.infrastructure.queue.memory import InMemoryWaitingQueue
from support_router.services.matching_engine import MatchingEngine
from support_router.services.routing_facade import RoutingFacade

_memory_queue: InMemoryWaitingQueue | None = None
_facade: RoutingFacade | None = None


def get_memory_queue() -> InMemoryWaitingQueue:
    global _memory_queue  # noqa: PLW0603
    if _memory_queue is None:
        _memory_queue = InMemoryWaitingQueue()
    return _memory_queue


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    queue = get_memory_queue() if settings.QUEUE_BACKEND == "memory" else None
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session, queue=queue)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_facade() -> RoutingFacade:
    global _facade  # noqa: PLW0603
    if _facade is None:
        engine = MatchingEngine(
            clear_language_on_session_end=settings.CLEAR_LANGUAGE_ON_SESSION_END,
        )
        _facade = RoutingFacade(engine)
    return _facade


FacadeDep = Annotated[RoutingFacade, Depends(get_facade)]
