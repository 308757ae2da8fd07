"""Reddit extractor for the search JSON listing."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

from core.errors import ParseFailure
from core.models import Media, Platform, RawItem, RedditMetadata, TextContent, utc_iso
from scrapers.base import BaseExtractor
from scrapers.page import Page

log = logging.getLogger(__name__)

MAX_IMAGES = 5
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


def _created_iso(created_utc) -> str:
    if not isinstance(created_utc, (int, float)):
        return ""
    try:
        return utc_iso(datetime.fromtimestamp(created_utc, tz=timezone.utc))
    except (OverflowError, ValueError, OSError):
        return ""


def _collect_images(post: dict) -> list[str]:
    images: list[str] = []
    preview = post.get("preview")
    previews = preview.get("images") if isinstance(preview, dict) else None
    for img in previews if isinstance(previews, list) else []:
        src = img.get("source") if isinstance(img, dict) else None
        if isinstance(src, dict) and isinstance(src.get("url"), str) and src["url"]:
            images.append(src["url"].replace("&amp;", "&"))

    url = post.get("url")
    if isinstance(url, str) and urlparse(url).path.lower().endswith(IMAGE_EXTENSIONS):
        images.append(url)
    return images[:MAX_IMAGES]


class RedditExtractor(BaseExtractor):
    platform = Platform.REDDIT

    async def _parse(self, page: Page, include_images: bool) -> list[RawItem]:
        raw = page.body_text()
        log.debug("Received %d characters of reddit JSON", len(raw))
        try:
            data = json.loads(raw)
        except ValueError as e:
            log.debug("First 500 chars: %s", raw[:500])
            raise ParseFailure(str(e)) from e

        listing = data.get("data") if isinstance(data, dict) else None
        children = listing.get("children") if isinstance(listing, dict) else None
        if not isinstance(children, list):
            return []
        log.info("Found %d posts in reddit JSON", len(children))

        items: list[RawItem] = []
        for child in children:
            post = child.get("data") if isinstance(child, dict) else None
            if not isinstance(post, dict):
                continue
            title = post.get("title")
            if not title:
                continue

            selftext = post.get("selftext") or ""
            content = f"{title}\n\n{selftext}" if selftext else title
            images = _collect_images(post) if include_images else []
            subreddit = post.get("subreddit_name_prefixed") or (
                f"r/{post['subreddit']}" if post.get("subreddit") else ""
            )

            items.append(
                RawItem(
                    id=f"reddit_{post.get('id', '')}",
                    source=Platform.REDDIT,
                    url=f"https://reddit.com{post.get('permalink', '')}",
                    text=TextContent(title=title, content=content),
                    media=Media(images=images),
                    metadata=RedditMetadata(
                        subreddit=subreddit,
                        score=post.get("score") or 0,
                        author=post.get("author") or "",
                        comments=post.get("num_comments") or 0,
                        created=_created_iso(post.get("created_utc")),
                        has_images=bool(images),
                    ),
                )
            )
        return items
