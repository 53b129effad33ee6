from __future__ import annotations

from support_router.domain.entities.queue_entry import QueueEntry
from support_router.infrastructure.db.models.waiting_queue import WaitingQueueEntryModel


def model_to_entity(model: WaitingQueueEntryModel) -> QueueEntry:
    return QueueEntry(
        customer_id=model.customer_id,
        language=model.language,
        enqueued_at=model.enqueued_at,
    )


def entity_to_model(entity: QueueEntry) -> WaitingQueueEntryModel:
    return WaitingQueueEntryModel(
        customer_id=entity.customer_id,
        language=entity.language,
        enqueued_at=entity.enqueued_at,
    )
