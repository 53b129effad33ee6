from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MediaKind(StrEnum):
    PHOTO = "photo"
    DOCUMENT = "document"


@dataclass(frozen=True, slots=True)
class MediaPayload:
    kind: MediaKind
    file_id: str
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class InboundEvent:
    """A message received by the transport layer, stripped of protocol details."""

    sender_id: int
    display_name: str | None = None
    text: str | None = None
    media: MediaPayload | None = None
    unsupported: bool = False
