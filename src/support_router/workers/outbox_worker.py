"""Outbox worker: relays routing events to Redis Pub/Sub for the transport layer.

Delivery is at least once. Each published envelope carries its ``outbox_id``
so transports can drop repeats after a worker crash between publish and commit.
"""
from __future__ import annotations

import asyncio
import logging
import signal
from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis

from support_router.application.ports.events import EventPublisher, RoutingEvent
from support_router.application.uow import UnitOfWork
from support_router.config import settings
from support_router.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from support_router.infrastructure.db.session import AsyncSessionLocal, dispose_engine
from support_router.infrastructure.db.uow import SqlAlchemyUoW
from support_router.logging_config import configure_logging

logger = logging.getLogger(__name__)

BASE_DELAY_SECONDS = 5
MAX_DELAY_SECONDS = 300


def calc_backoff(attempts: int, now: datetime | None = None) -> datetime:
    delay = min(BASE_DELAY_SECONDS * (2 ** attempts), MAX_DELAY_SECONDS)
    return (now or datetime.now(timezone.utc)) + timedelta(seconds=delay)


async def process_batch(
    uow: UnitOfWork,
    publisher: EventPublisher,
    *,
    channel: str = settings.REDIS_PUBSUB_CHANNEL,
    batch_size: int = settings.OUTBOX_BATCH_SIZE,
    max_attempts: int = settings.OUTBOX_MAX_ATTEMPTS,
) -> int:
    """Publish one batch of due records and return how many were sent.

    Records that already used up ``max_attempts`` are parked as dead instead
    of being published.
    """
    batch = await uow.outbox.fetch_pending(batch_size)
    if not batch:
        return 0

    sent_ids: list[int] = []
    dead_ids: list[int] = []
    for record in batch:
        if record.attempts >= max_attempts:
            dead_ids.append(record.id)
            continue
        event = RoutingEvent(event_type=record.event_type, data=record.payload, outbox_id=record.id)
        try:
            await publisher.publish(channel, event)
        except Exception:
            logger.exception("Failed to publish %s (outbox id %d)", record.event_type, record.id)
            await uow.outbox.mark_failed(record.id, calc_backoff(record.attempts))
        else:
            sent_ids.append(record.id)

    await uow.outbox.mark_sent(sent_ids)
    if dead_ids:
        logger.warning("Giving up on outbox records %s after %d attempts", dead_ids, max_attempts)
        await uow.outbox.mark_dead(dead_ids)
    await uow.commit()

    if sent_ids:
        logger.info("Published %d routing events to %s", len(sent_ids), channel)
    return len(sent_ids)


async def run_outbox_worker(stop: asyncio.Event | None = None) -> None:
    stop = stop or asyncio.Event()
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    publisher = RedisPubSubPublisher(redis)

    logger.info(
        "Outbox worker started (channel=%s, poll=%.1fs, batch=%d, max_attempts=%d)",
        settings.REDIS_PUBSUB_CHANNEL,
        settings.OUTBOX_POLL_INTERVAL,
        settings.OUTBOX_BATCH_SIZE,
        settings.OUTBOX_MAX_ATTEMPTS,
    )

    try:
        while not stop.is_set():
            try:
                async with AsyncSessionLocal() as session:
                    await process_batch(SqlAlchemyUoW(session), publisher)
            except Exception:
                logger.exception("Outbox worker loop error")
            try:
                await asyncio.wait_for(stop.wait(), timeout=settings.OUTBOX_POLL_INTERVAL)
            except asyncio.TimeoutError:
                pass
    finally:
        await redis.aclose()
        await dispose_engine()
        logger.info("Outbox worker stopped")


async def _serve() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    await run_outbox_worker(stop)


def main() -> None:
    configure_logging()
    asyncio.run(_serve())


if __name__ == "__main__":
    main()
