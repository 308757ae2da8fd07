from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


def utc_iso(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def utc_now_iso() -> str:
    return utc_iso(datetime.now(timezone.utc))


class Platform(str, Enum):
    REDDIT = "reddit"
    TWITTER = "twitter"
    NEWS = "news"
    HACKERNEWS = "hackernews"


class ContentType(str, Enum):
    TEXT = "text"
    TEXT_IMAGE = "text_image"


@dataclass(frozen=True)
class SeedRequest:
    """One (url, platform, keyword) unit of crawl work."""

    url: str
    platform: Platform
    keyword: str


@dataclass
class TextContent:
    content: str
    title: str | None = None

    def to_dict(self) -> dict[str, str]:
        out = {"content": self.content}
        if self.title is not None:
            out = {"title": self.title, **out}
        return out


@dataclass
class Media:
    images: list[str] = field(default_factory=list)


# ── per-source metadata ──────────────────────────────────────────────


@dataclass
class RedditMetadata:
    subreddit: str = ""
    score: int = 0
    author: str = ""
    comments: int = 0
    created: str = ""
    has_images: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class HackerNewsMetadata:
    author: str = ""
    points: int = 0
    comments: int = 0
    created: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TwitterMetadata:
    author: str = ""
    timestamp: str = ""
    has_images: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NewsMetadata:
    source_site: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


ItemMetadata = Union[RedditMetadata, HackerNewsMetadata, TwitterMetadata, NewsMetadata]


@dataclass
class RawItem:
    """A single post normalised from any source."""

    id: str  # source-prefixed, e.g. "reddit_abc123"
    source: Platform
    url: str
    text: TextContent
    metadata: ItemMetadata
    media: Media = field(default_factory=Media)

    @property
    def content_type(self) -> ContentType:
        return ContentType.TEXT_IMAGE if self.media.images else ContentType.TEXT

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "url": self.url,
            "content_type": self.content_type.value,
            "text": self.text.to_dict(),
            "media": {"images": list(self.media.images)},
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class Record:
    """A RawItem that passed filtering, tagged with its keyword and scrape time."""

    item: RawItem
    keyword: str
    scraped_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {**self.item.to_dict(), "keyword": self.keyword, "scraped_at": self.scraped_at}


# ── extraction outcome & run state ───────────────────────────────────


class ErrorKind(str, Enum):
    PARSE_FAILURE = "parse_failure"
    STRUCTURAL_TIMEOUT = "structural_timeout"


@dataclass
class ExtractionResult:
    """Ok(items) when ``error`` is None, otherwise Err(error, message)."""

    items: list[RawItem] = field(default_factory=list)
    error: ErrorKind | None = None
    message: str = ""

    @classmethod
    def ok(cls, items: list[RawItem]) -> ExtractionResult:
        return cls(items=items)

    @classmethod
    def err(cls, kind: ErrorKind, message: str = "") -> ExtractionResult:
        return cls(error=kind, message=message)

    @property
    def is_ok(self) -> bool:
        return self.error is None


@dataclass
class RunContext:
    """Mutable state of one crawl run. Only touched by the sequential crawl loop."""

    record_count: int = 0
    seen_hashes: set[str] = field(default_factory=set)
    requests_issued: int = 0


@dataclass
class CrawlSummary:
    """Outcome of a single crawl run."""

    records_saved: int
    requests: int
    failures: list[str]
    skipped: int
    duration_seconds: float
    budget_reached: bool = False
