"""Reassembly of base64 payloads streamed as separate fragments.

Each fragment is usually encoded on its own and padded independently, so
joining the raw strings puts '=' in the middle of the stream and the
decoded audio is corrupted from the first boundary onward. Padding is
stripped per fragment and re-applied once to the joined value.
"""
from __future__ import annotations

import re

_WHITESPACE_PATTERN = re.compile(r"\s+")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _clean_chunk(chunk: str) -> str:
    cleaned = chunk.strip()
    if cleaned.startswith("data:") and "," in cleaned:
        cleaned = cleaned.split(",", 1)[1]
    cleaned = _WHITESPACE_PATTERN.sub("", cleaned)
    cleaned = cleaned.translate(_URLSAFE_TO_STANDARD)
    return cleaned.rstrip("=")


def merge_base64_chunks(chunks: list[str]) -> str:
    """Join base64 fragments into one standard, correctly padded value.

    Returns "" when nothing usable remains, or when the joined length is
    1 mod 4: a single leftover sextet cannot encode a byte, so no amount
    of padding repairs it.
    """
    joined = "".join(_clean_chunk(chunk) for chunk in chunks if isinstance(chunk, str))
    if not joined:
        return ""
    remainder = len(joined) % 4
    if remainder == 1:
        return ""
    if remainder:
        joined += "=" * (4 - remainder)
    return joined
