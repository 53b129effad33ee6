from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class RoutingEvent:
    """A routing state change relayed to the transport layer.

    ``outbox_id`` lets consumers drop duplicates, since the outbox
    delivers at least once.
    """

    event_type: str
    data: dict[str, Any] = field(default_factory=dict)
    outbox_id: int | None = None


class EventPublisher(Protocol):
    async def publish(self, channel: str, event: RoutingEvent) -> None: ...
