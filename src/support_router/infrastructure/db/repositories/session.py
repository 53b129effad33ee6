from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import ParticipantRole, SessionStatus
from support_router.infrastructure.db.errors import storage_errors
from support_router.infrastructure.db.mappers import session as mapper
from support_router.infrastructure.db.models.session import SupportSessionModel


class SessionReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, session_id: UUID) -> SupportSession | None:
        with storage_errors():
            result = await self._session.get(SupportSessionModel, session_id)
        return mapper.model_to_entity(result) if result else None

    async def find_by_participant_role_and_status(
        self,
        participant_id: int,
        role: ParticipantRole,
        status: SessionStatus,
    ) -> list[SupportSession]:
        column = (
            SupportSessionModel.customer_id
            if role == ParticipantRole.CUSTOMER
            else SupportSessionModel.operator_id
        )
        stmt = (
            select(SupportSessionModel)
            .where(column == participant_id, SupportSessionModel.status == status)
            .order_by(SupportSessionModel.created_at.asc())
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class SessionWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, session: SupportSession) -> SupportSession:
        model = mapper.entity_to_model(session)
        with storage_errors():
            self._session.add(model)
            await self._session.flush()
        return mapper.model_to_entity(model)

    async def close(self, session_id: UUID, closed_at: datetime) -> None:
        stmt = (
            update(SupportSessionModel)
            .where(
                SupportSessionModel.id == session_id,
                SupportSessionModel.status == SessionStatus.ACTIVE,
            )
            .values(status=SessionStatus.CLOSED, closed_at=closed_at)
            .execution_options(synchronize_session="fetch")
        )
        with storage_errors():
            await self._session.execute(stmt)
