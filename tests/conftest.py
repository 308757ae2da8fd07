from __future__ import annotations

import pytest

from core.models import HackerNewsMetadata, Platform, RawItem, Record, TextContent
from scrapers.page import Page


class ListSink:
    """Collects pushed records in memory."""

    def __init__(self) -> None:
        self.records: list[Record] = []

    async def push(self, record: Record) -> None:
        self.records.append(record)


def make_item(content: str, source: Platform = Platform.HACKERNEWS, idx: int = 0) -> RawItem:
    return RawItem(
        id=f"{source.value}_{idx}",
        source=source,
        url=f"https://example.com/{source.value}/{idx}",
        text=TextContent(title=f"Item {idx}", content=content),
        metadata=HackerNewsMetadata(author="tester"),
    )


def long_text(tag: str) -> str:
    return f"{tag}: " + "a sufficiently long body of text for filtering purposes " * 2


@pytest.fixture
def list_sink() -> ListSink:
    return ListSink()


@pytest.fixture
def blank_page() -> Page:
    return Page("<html><body></body></html>", "https://example.com/")
