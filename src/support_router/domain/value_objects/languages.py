from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[,\s]+")


def parse_language_codes(raw: str | list[str] | set[str] | frozenset[str]) -> frozenset[str]:
    """Split a comma/space separated list into trimmed, lower-cased codes.

    Blank entries are dropped, so ``"RU, en ,,uz"`` yields ``{"ru", "en", "uz"}``.
    """
    if isinstance(raw, str):
        parts = _SEPARATORS.split(raw)
    else:
        parts = [p for item in raw for p in _SEPARATORS.split(item)]
    return frozenset(p.strip().lower() for p in parts if p and p.strip())


def normalize_language(code: str) -> str:
    return code.strip().lower()
