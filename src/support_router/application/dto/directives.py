from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

from support_router.application.dto.inbound import MediaPayload
from support_router.domain.value_objects.enums import MenuKind


@dataclass(frozen=True, slots=True)
class SendText:
    chat_id: int
    text: str
    kind: Literal["send_text"] = "send_text"


@dataclass(frozen=True, slots=True)
class ForwardMessage:
    chat_id: int
    text: str | None = None
    media: MediaPayload | None = None
    kind: Literal["forward"] = "forward"


@dataclass(frozen=True, slots=True)
class PresentMenu:
    chat_id: int
    menu: MenuKind
    kind: Literal["present_menu"] = "present_menu"


Directive = Union[SendText, ForwardMessage, PresentMenu]
