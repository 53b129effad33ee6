from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from support_router.domain.entities.participant import Participant
from support_router.domain.value_objects.enums import Availability, ParticipantRole
from support_router.infrastructure.db.errors import storage_errors
from support_router.infrastructure.db.mappers import participant as mapper
from support_router.infrastructure.db.models.participant import ParticipantModel


class ParticipantReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, participant_id: int) -> Participant | None:
        with storage_errors():
            result = await self._session.get(ParticipantModel, participant_id)
        return mapper.model_to_entity(result) if result else None

    async def list_operators_by_status_and_language(
        self,
        status: Availability,
        language: str,
    ) -> list[Participant]:
        stmt = (
            select(ParticipantModel)
            .where(
                ParticipantModel.role == ParticipantRole.OPERATOR,
                ParticipantModel.availability == status,
                ParticipantModel.supported_languages.any(language),
            )
            .order_by(ParticipantModel.created_at.asc(), ParticipantModel.id.asc())
        )
        with storage_errors():
            result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ParticipantWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, participant: Participant) -> Participant:
        with storage_errors():
            model = await self._session.get(ParticipantModel, participant.id)
            if model is None:
                model = mapper.entity_to_model(participant)
                self._session.add(model)
            else:
                mapper.apply_entity(model, participant)
            await self._session.flush()
        return mapper.model_to_entity(model)
