from __future__ import annotations

from pydantic import BaseModel

from support_router.application.dto.inbound import InboundEvent, MediaKind, MediaPayload
from support_router.domain.value_objects.enums import MenuKind


class MediaSchema(BaseModel):
    kind: MediaKind
    file_id: str
    caption: str | None = None

    model_config = {"from_attributes": True}


class InboundEventRequest(BaseModel):
    sender_id: int
    display_name: str | None = None
    text: str | None = None
    media: MediaSchema | None = None
    unsupported: bool = False

    def to_dto(self) -> InboundEvent:
        media = None
        if self.media is not None:
            media = MediaPayload(
                kind=self.media.kind,
                file_id=self.media.file_id,
                caption=self.media.caption,
            )
        return InboundEvent(
            sender_id=self.sender_id,
            display_name=self.display_name,
            text=self.text,
            media=media,
            unsupported=self.unsupported,
        )


class DirectiveResponse(BaseModel):
    kind: str
    chat_id: int
    text: str | None = None
    media: MediaSchema | None = None
    menu: MenuKind | None = None

    model_config = {"from_attributes": True}
