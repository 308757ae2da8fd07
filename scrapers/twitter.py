from __future__ import annotations

import logging
from urllib.parse import urljoin

from core.models import Media, Platform, RawItem, TextContent, TwitterMetadata
from scrapers.base import BaseExtractor, epoch_millis
from scrapers.page import Page, first_attr, first_text

log = logging.getLogger(__name__)

TWEET_SELECTOR = 'article[data-testid="tweet"]'
MAX_TWEETS = 20
MAX_IMAGES = 4


class TwitterExtractor(BaseExtractor):
    """Extracts tweets from a rendered X/Twitter search page.

    Tweet ids are synthesised from the scrape time and position, so the same
    tweet seen in two runs gets two ids; duplicates are only caught by the
    content fingerprint.
    """

    platform = Platform.TWITTER
    ready_selector = TWEET_SELECTOR

    async def _parse(self, page: Page, include_images: bool) -> list[RawItem]:
        tweets = await page.wait_for_selector(TWEET_SELECTOR, self.wait_timeout)
        stamp = epoch_millis()

        items: list[RawItem] = []
        for index, tweet in enumerate(tweets):
            if index >= MAX_TWEETS:
                break

            text = first_text(tweet, '[data-testid="tweetText"]')
            if not text:
                continue

            images: list[str] = []
            if include_images:
                images = [
                    urljoin(page.url, str(img.attrib.get("src") or ""))
                    for img in tweet.css('img[src*="pbs.twimg.com/media"]')
                ][:MAX_IMAGES]

            items.append(
                RawItem(
                    id=f"twitter_{stamp}_{index}",
                    source=Platform.TWITTER,
                    url=page.url,
                    text=TextContent(content=text),
                    media=Media(images=images),
                    metadata=TwitterMetadata(
                        author=first_text(tweet, '[data-testid="User-Name"]'),
                        timestamp=first_attr(tweet, "time", "datetime"),
                        has_images=bool(images),
                    ),
                )
            )
        log.debug("Parsed %d of %d tweet elements", len(items), len(tweets))
        return items
