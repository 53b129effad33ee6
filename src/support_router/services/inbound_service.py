"""Turns a raw inbound chat event into routing calls and outbound directives."""
from __future__ import annotations

import logging

from support_router.application.dto.directives import (
    Directive,
    ForwardMessage,
    PresentMenu,
    SendText,
)
from support_router.application.dto.inbound import InboundEvent
from support_router.application.dto.routing import SessionEnded
from support_router.application.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidOperationError,
)
from support_router.application.uow import UnitOfWork
from support_router.config import Settings, settings as default_settings
from support_router.domain.entities.participant import Participant
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import Availability
from support_router.services import templates
from support_router.services.routing_facade import RoutingFacade

logger = logging.getLogger(__name__)


def _is_command(text: str, token: str) -> bool:
    if not text:
        return False
    if text == token:
        return True
    return token.startswith("/") and text.split(maxsplit=1)[0] == token


async def handle_inbound_event(
    event: InboundEvent,
    facade: RoutingFacade,
    uow: UnitOfWork,
    settings: Settings = default_settings,
) -> list[Directive]:
    participant = await facade.on_contact(event.sender_id, event.display_name, uow)
    try:
        return await _dispatch(event, participant, facade, uow, settings)
    except (InvalidOperationError, InvalidArgumentError, ConflictError) as exc:
        logger.info("Rejected event from %s: %s", participant.id, exc.detail)
        return [SendText(participant.id, exc.detail)]


async def _dispatch(
    event: InboundEvent,
    participant: Participant,
    facade: RoutingFacade,
    uow: UnitOfWork,
    settings: Settings,
) -> list[Directive]:
    text = (event.text or "").strip()
    sender = participant.id

    if text and _is_command(text, settings.REGISTER_TOKEN):
        languages = text[len(settings.REGISTER_TOKEN):].strip()
        if not languages:
            return [SendText(sender, templates.register_usage(settings.REGISTER_TOKEN))]
        registration = await facade.on_register_operator(participant, languages, uow)
        directives: list[Directive] = [
            SendText(
                sender,
                templates.registered_as_operator(sorted(registration.operator.supported_languages)),
            ),
        ]
        directives += await _follow_up_notices(registration.follow_up, uow)
        return directives

    if any(_is_command(text, token) for token in settings.START_TOKENS):
        outcome = await facade.on_start(participant, uow)
        directives = await _session_ended_notices(outcome.ended, uow)
        directives.append(PresentMenu(sender, outcome.menu))
        return directives

    if any(_is_command(text, token) for token in settings.STOP_TOKENS):
        ended = await facade.on_stop(participant, uow)
        if ended is None:
            return [SendText(sender, templates.not_in_session())]
        return [SendText(sender, templates.session_ended())] + await _session_ended_notices(ended, uow)

    if participant.is_operator and text in (settings.AVAILABLE_TOKEN, settings.BUSY_TOKEN):
        available = text == settings.AVAILABLE_TOKEN
        outcome = await facade.on_set_availability(
            participant,
            Availability.AVAILABLE if available else Availability.BUSY,
            uow,
        )
        return [SendText(sender, templates.availability_changed(available))] + await _follow_up_notices(
            outcome.follow_up, uow,
        )

    target = await facade.resolve_forward_target(participant, uow)
    if target is not None:
        if event.media is not None:
            return [ForwardMessage(target.id, text=None, media=event.media)]
        if text and not text.startswith("/"):
            return [ForwardMessage(target.id, text=event.text)]
        if event.unsupported:
            return [SendText(sender, templates.unsupported_message())]
        return []

    if text.lower() in settings.SUPPORTED_LANGUAGES:
        operator = await facade.on_select_language(participant, text.lower(), uow)
        if operator is None:
            position = await uow.queue.position_of(sender)
            return [SendText(sender, templates.queued(position))]
        return [
            SendText(sender, templates.connected_to_operator()),
            SendText(operator.id, templates.new_customer_connected(_name_of(participant))),
        ]

    if text and not text.startswith("/"):
        return [SendText(sender, templates.usage_hint(settings.REGISTER_TOKEN))]
    return []


def _name_of(participant: Participant) -> str:
    return participant.display_name or str(participant.id)


async def _session_ended_notices(ended: SessionEnded | None, uow: UnitOfWork) -> list[Directive]:
    if ended is None:
        return []
    directives: list[Directive] = [SendText(ended.counterpart_id, templates.session_closed_by_peer())]
    directives += await _follow_up_notices(ended.follow_up, uow)
    return directives


async def _follow_up_notices(session: SupportSession | None, uow: UnitOfWork) -> list[Directive]:
    """Tell a queued customer and the operator who picked them up that they are connected."""
    if session is None:
        return []
    customer = await uow.participants.get_by_id(session.customer_id)
    name = _name_of(customer) if customer is not None else str(session.customer_id)
    return [
        SendText(session.customer_id, templates.connected_to_operator()),
        SendText(session.operator_id, templates.new_customer_connected(name)),
    ]
