from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from support_router.application.repositories.outbox import OutboxRecord
from support_router.infrastructure.db.errors import storage_errors
from support_router.infrastructure.db.models.outbox import OutboxMessageModel, OutboxStatus

_DUE_STATUSES = (OutboxStatus.PENDING, OutboxStatus.FAILED)


class OutboxWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, event_type: str, payload: dict[str, Any]) -> None:
        with storage_errors():
            self._session.add(OutboxMessageModel(event_type=event_type, payload=payload))
            await self._session.flush()

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        """Claim due records in creation order; rows locked by another worker are skipped."""
        model = OutboxMessageModel
        due = model.next_retry_at.is_(None) | (model.next_retry_at <= datetime.now(timezone.utc))
        stmt = (
            select(model)
            .where(model.status.in_(_DUE_STATUSES), due)
            .order_by(model.created_at, model.id)
            .limit(batch_size)
            .with_for_update(skip_locked=True)
        )
        with storage_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        records = [
            OutboxRecord(id=row.id, event_type=row.event_type, payload=row.payload, attempts=row.attempts)
            for row in rows
        ]
        await self._set_status([r.id for r in records], OutboxStatus.PROCESSING)
        return records

    async def mark_sent(self, ids: list[int]) -> None:
        await self._set_status(ids, OutboxStatus.SENT)

    async def mark_dead(self, ids: list[int]) -> None:
        await self._set_status(ids, OutboxStatus.DEAD)

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        await self._set_status(
            [record_id],
            OutboxStatus.FAILED,
            attempts=OutboxMessageModel.attempts + 1,
            next_retry_at=next_retry_at,
        )

    async def _set_status(self, ids: list[int], status: OutboxStatus, **values: Any) -> None:
        if not ids:
            return
        stmt = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.id.in_(ids))
            .values(status=status, **values)
        )
        with storage_errors():
            await self._session.execute(stmt)
