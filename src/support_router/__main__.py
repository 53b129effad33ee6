"""Entrypoint: python -m support_router"""
from __future__ import annotations

import uvicorn

from support_router.logging_config import configure_logging


def main() -> None:
    configure_logging()
    uvicorn.run(
        "support_router.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )


if __name__ == "__main__":
    main()
