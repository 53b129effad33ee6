from __future__ import annotations

import logging

from support_router.api.middleware.correlation_id import CorrelationIdFilter
from support_router.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s]: %(message)s"


def configure_logging(level: int | str | None = None) -> None:
    """Root handler for the API and the outbox worker; tags lines with the request id."""
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level or settings.LOG_LEVEL.upper(), handlers=[handler])
