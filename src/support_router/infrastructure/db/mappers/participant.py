from __future__ import annotations

from support_router.domain.entities.participant import Participant
from support_router.domain.value_objects.enums import Availability, ParticipantRole
from support_router.infrastructure.db.models.participant import ParticipantModel


def model_to_entity(model: ParticipantModel) -> Participant:
    return Participant(
        id=model.id,
        display_name=model.display_name,
        role=ParticipantRole(model.role),
        availability=Availability(model.availability),
        created_at=model.created_at,
        supported_languages=frozenset(model.supported_languages or ()),
        selected_language=model.selected_language,
    )


def apply_entity(model: ParticipantModel, entity: Participant) -> ParticipantModel:
    model.display_name = entity.display_name
    model.role = entity.role.value
    model.availability = entity.availability.value
    model.supported_languages = sorted(entity.supported_languages)
    model.selected_language = entity.selected_language
    return model


def entity_to_model(entity: Participant) -> ParticipantModel:
    model = ParticipantModel(id=entity.id, created_at=entity.created_at)
    return apply_entity(model, entity)
