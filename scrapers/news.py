from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse

from core.models import NewsMetadata, Platform, RawItem, TextContent
from scrapers.base import BaseExtractor, epoch_millis
from scrapers.page import Page, first_attr, first_text

log = logging.getLogger(__name__)

ARTICLE_SELECTOR = "article, .article"
TITLE_SELECTOR = "h2, h3, .title"
SNIPPET_SELECTOR = "p, .snippet, .description"
MAX_ARTICLES = 15


class NewsExtractor(BaseExtractor):
    """Extracts article blurbs from a rendered news search page.

    Only the snippet becomes ``content``; the headline is kept as the title.
    """

    platform = Platform.NEWS
    ready_selector = ARTICLE_SELECTOR

    async def _parse(self, page: Page, include_images: bool) -> list[RawItem]:
        articles = await page.wait_for_selector(ARTICLE_SELECTOR, self.wait_timeout)
        stamp = epoch_millis()

        items: list[RawItem] = []
        for index, article in enumerate(articles):
            if index >= MAX_ARTICLES:
                break

            title = first_text(article, TITLE_SELECTOR)
            snippet = first_text(article, SNIPPET_SELECTOR)
            if not f"{title}\n\n{snippet}".strip():
                continue

            href = first_attr(article, "a", "href")
            link = urljoin(page.url, href) if href else page.url

            items.append(
                RawItem(
                    id=f"news_{stamp}_{index}",
                    source=Platform.NEWS,
                    url=link,
                    text=TextContent(title=title, content=snippet),
                    metadata=NewsMetadata(source_site=urlparse(link).hostname or ""),
                )
            )
        return items
