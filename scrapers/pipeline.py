from __future__ import annotations

import hashlib

from core.models import RawItem, RunContext


def content_fingerprint(content: str) -> str:
    """128-bit MD5 hex digest of the text. Used for dedup only, not security."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def filter_items(
    items: list[RawItem], ctx: RunContext, min_text_length: int
) -> list[RawItem]:
    """Drop short items and anything whose content was already seen this run.

    Fingerprints of kept items are added to ``ctx.seen_hashes``.
    """
    kept: list[RawItem] = []
    for item in items:
        content = item.text.content if item.text else ""
        if not content or len(content) < min_text_length:
            continue
        digest = content_fingerprint(content)
        if digest in ctx.seen_hashes:
            continue
        ctx.seen_hashes.add(digest)
        kept.append(item)
    return kept
