from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from support_router.application.repositories.waiting_queue import QueuePredicate
from support_router.domain.entities.queue_entry import QueueEntry
from support_router.infrastructure.db.errors import storage_errors
from support_router.infrastructure.db.mappers import waiting_queue as mapper
from support_router.infrastructure.db.models.waiting_queue import WaitingQueueEntryModel


class WaitingQueueRepo:
    """Waiting queue persisted in the ``waiting_queue`` table, ordered by seq.

    Changes ride on the surrounding database transaction, so commit and
    rollback are handled by the session.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get(self, customer_id: int) -> WaitingQueueEntryModel | None:
        stmt = select(WaitingQueueEntryModel).where(
            WaitingQueueEntryModel.customer_id == customer_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def enqueue(self, entry: QueueEntry) -> bool:
        with storage_errors():
            existing = await self._get(entry.customer_id)
            if existing is not None:
                if existing.language != entry.language:
                    existing.language = entry.language
                    await self._session.flush()
                return False
            self._session.add(mapper.entity_to_model(entry))
            await self._session.flush()
        return True

    async def dequeue_first_matching(self, predicate: QueuePredicate) -> QueueEntry | None:
        stmt = select(WaitingQueueEntryModel).order_by(WaitingQueueEntryModel.seq.asc())
        with storage_errors():
            result = await self._session.execute(stmt)
            for model in result.scalars().all():
                entry = mapper.model_to_entity(model)
                if predicate(entry):
                    await self._session.delete(model)
                    await self._session.flush()
                    return entry
        return None

    async def remove(self, customer_id: int) -> bool:
        stmt = delete(WaitingQueueEntryModel).where(
            WaitingQueueEntryModel.customer_id == customer_id,
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def peek_first(self) -> QueueEntry | None:
        stmt = select(WaitingQueueEntryModel).order_by(WaitingQueueEntryModel.seq.asc()).limit(1)
        with storage_errors():
            result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def position_of(self, customer_id: int) -> int | None:
        with storage_errors():
            model = await self._get(customer_id)
            if model is None:
                return None
            stmt = select(func.count()).where(WaitingQueueEntryModel.seq <= model.seq)
            result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_entries(self) -> list[QueueEntry]:
        stmt = select(WaitingQueueEntryModel).order_by(WaitingQueueEntryModel.seq.asc())
        with storage_errors():
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass
