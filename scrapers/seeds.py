from __future__ import annotations

import logging
from urllib.parse import quote

from core.models import Platform, SeedRequest

log = logging.getLogger(__name__)

DEFAULT_PLATFORMS = ["x"]
DEFAULT_KEYWORDS = ["artificial intelligence"]

HN_PAGE_SIZE = 50

# Input tag -> (platform, search URL template)
SEED_TEMPLATES: dict[str, tuple[Platform, str]] = {
    "reddit": (
        Platform.REDDIT,
        "https://www.reddit.com/search.json?q={q}&sort=top",
    ),
    "x": (
        Platform.TWITTER,
        "https://twitter.com/search?q={q}&src=typed_query",
    ),
    "news": (
        Platform.NEWS,
        "https://news.google.com/search?q={q}",
    ),
    "hackernews": (
        Platform.HACKERNEWS,
        "https://hn.algolia.com/api/v1/search?query={q}&tags=story"
        f"&hitsPerPage={HN_PAGE_SIZE}",
    ),
}


def build_seeds(
    platforms: list[str] | None = None, keywords: list[str] | None = None
) -> list[SeedRequest]:
    """Platforms x keywords, platform-major. Unknown platform tags are skipped."""
    platforms = platforms or DEFAULT_PLATFORMS
    keywords = keywords or DEFAULT_KEYWORDS

    seeds: list[SeedRequest] = []
    for tag in platforms:
        template = SEED_TEMPLATES.get(tag)
        if template is None:
            log.debug("No seed template for platform tag %r", tag)
            continue
        platform, url = template
        for keyword in keywords:
            seeds.append(
                SeedRequest(
                    url=url.format(q=quote(keyword, safe="")),
                    platform=platform,
                    keyword=keyword,
                )
            )
    return seeds
