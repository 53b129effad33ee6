"""Seed development data: a few operators covering the configured languages."""
from __future__ import annotations

import asyncio
import logging

from support_router.config import settings
from support_router.infrastructure.db.session import AsyncSessionLocal, create_tables, dispose_engine
from support_router.infrastructure.db.uow import SqlAlchemyUoW
from support_router.logging_config import configure_logging
from support_router.services import directory_service
from support_router.services.matching_engine import utc_now

logger = logging.getLogger(__name__)

DEV_OPERATORS: list[tuple[int, str, str]] = [
    (900001, "Dilnoza", "uz,ru"),
    (900002, "Sergey", "ru,en"),
    (900003, "Emma", "en"),
]


async def seed() -> None:
    await create_tables()
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        for participant_id, name, languages in DEV_OPERATORS:
            participant = await directory_service.resolve_or_create(participant_id, name, utc_now(), uow)
            await directory_service.register_operator(participant, languages, uow)
        await uow.commit()

    covered = {code for _, _, langs in DEV_OPERATORS for code in langs.split(",")}
    missing = sorted(set(settings.SUPPORTED_LANGUAGES) - covered)
    logger.info("Seeded %d operators", len(DEV_OPERATORS))
    if missing:
        logger.warning("No seeded operator speaks: %s", ", ".join(missing))


async def _run() -> None:
    try:
        await seed()
    finally:
        await dispose_engine()


def main() -> None:
    configure_logging()
    asyncio.run(_run())


if __name__ == "__main__":
    main()
