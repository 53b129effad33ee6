"""Import all models so Base.metadata sees every table."""
from support_router.infrastructure.db.models.outbox import OutboxMessageModel
from support_router.infrastructure.db.models.participant import ParticipantModel
from support_router.infrastructure.db.models.session import SupportSessionModel
from support_router.infrastructure.db.models.waiting_queue import WaitingQueueEntryModel

__all__ = [
    "OutboxMessageModel",
    "ParticipantModel",
    "SupportSessionModel",
    "WaitingQueueEntryModel",
]
