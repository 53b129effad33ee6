"""JSON envelope for routing events on the wire."""
from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from support_router.application.ports.events import RoutingEvent


def _default(o: object) -> Any:
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, UUID):
        return str(o)
    if isinstance(o, datetime):
        return o.isoformat()
    if isinstance(o, (set, frozenset)):
        return sorted(o)
    raise TypeError(f"{type(o).__name__} is not JSON serializable")


def encode_event(event: RoutingEvent) -> str:
    envelope: dict[str, Any] = {"event": event.event_type, "data": event.data}
    if event.outbox_id is not None:
        envelope["outbox_id"] = event.outbox_id
    return json.dumps(envelope, default=_default)


def decode_event(raw: str | bytes) -> RoutingEvent:
    """Inverse of :func:`encode_event`, for transports consuming the channel."""
    envelope = json.loads(raw)
    return RoutingEvent(
        event_type=envelope["event"],
        data=envelope.get("data") or {},
        outbox_id=envelope.get("outbox_id"),
    )
