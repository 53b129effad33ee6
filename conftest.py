"""Root conftest: pins routing settings for tests before support_router is imported."""
from __future__ import annotations

import os
from pathlib import Path

_ENV_FILE = Path(__file__).resolve().parent / ".env.test"


def _load_test_env(path: Path) -> None:
    if not path.exists():
        return
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip().strip('"'))


_load_test_env(_ENV_FILE)
os.environ["QUEUE_BACKEND"] = "memory"
os.environ.pop("CLEAR_LANGUAGE_ON_SESSION_END", None)
