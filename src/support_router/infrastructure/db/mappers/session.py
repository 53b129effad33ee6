from __future__ import annotations

from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import SessionStatus
from support_router.infrastructure.db.models.session import SupportSessionModel


def model_to_entity(model: SupportSessionModel) -> SupportSession:
    return SupportSession(
        id=model.id,
        customer_id=model.customer_id,
        operator_id=model.operator_id,
        status=SessionStatus(model.status),
        created_at=model.created_at,
        closed_at=model.closed_at,
    )


def entity_to_model(entity: SupportSession) -> SupportSessionModel:
    return SupportSessionModel(
        id=entity.id,
        customer_id=entity.customer_id,
        operator_id=entity.operator_id,
        status=entity.status.value,
        created_at=entity.created_at,
        closed_at=entity.closed_at,
    )
