"""HackerNews extractor for the Algolia search API."""

from __future__ import annotations

import json
import logging

from core.errors import ParseFailure
from core.models import HackerNewsMetadata, Platform, RawItem, TextContent
from scrapers.base import BaseExtractor
from scrapers.page import Page

log = logging.getLogger(__name__)

HN_ITEM_URL = "https://news.ycombinator.com/item?id={}"


class HackerNewsExtractor(BaseExtractor):
    platform = Platform.HACKERNEWS

    async def _parse(self, page: Page, include_images: bool) -> list[RawItem]:
        raw = page.body_text()
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise ParseFailure(str(e)) from e

        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            return []
        log.info("Found %d HackerNews stories", len(hits))

        items: list[RawItem] = []
        for hit in hits:
            if not isinstance(hit, dict) or not hit.get("title"):
                continue
            object_id = hit.get("objectID", "")
            items.append(
                RawItem(
                    id=f"hn_{object_id}",
                    source=Platform.HACKERNEWS,
                    url=hit.get("url") or HN_ITEM_URL.format(object_id),
                    text=TextContent(
                        title=hit["title"],
                        content=hit.get("story_text") or hit["title"],
                    ),
                    metadata=HackerNewsMetadata(
                        author=hit.get("author") or "",
                        points=hit.get("points") or 0,
                        comments=hit.get("num_comments") or 0,
                        created=hit.get("created_at") or "",
                    ),
                )
            )
        return items
