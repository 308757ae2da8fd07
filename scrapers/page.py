"""Read-only view of a fetched document that extractors parse."""

from __future__ import annotations

from scrapling.parser import Selector

from core.errors import StructuralTimeout


def first_text(element, selector: str) -> str:
    """Trimmed text content of the first match under ``element``, or ''."""
    found = element.css(selector)
    if not found:
        return ""
    return str(found[0].get_all_text(separator="")).strip()


def first_attr(element, selector: str, attr: str) -> str:
    found = element.css(selector)
    if not found:
        return ""
    return str(found[0].attrib.get(attr) or "")


class Page:
    """A fetched page: the raw body plus a lazily parsed scrapling Selector.

    JSON endpoints come back either as the raw body or, when rendered by a
    browser, wrapped in a ``<pre>`` element. ``body_text`` hides that difference.
    """

    def __init__(self, content: str, url: str) -> None:
        self.content = content
        self.url = url
        self._doc: Selector | None = None

    @property
    def document(self) -> Selector:
        if self._doc is None:
            self._doc = Selector(self.content or "<html></html>", url=self.url)
        return self._doc

    def _looks_like_html(self) -> bool:
        return self.content.lstrip().startswith("<")

    def body_text(self) -> str:
        if self._looks_like_html():
            pre = self.document.css("pre")
            if pre:
                return pre[0].get_all_text(separator="")
            body = self.document.css("body")
            if body:
                return body[0].get_all_text(separator="")
        return self.content

    def css(self, selector: str):
        if not self._looks_like_html():
            return []
        return self.document.css(selector)

    async def wait_for_selector(self, selector: str, timeout: float):
        """Return the elements matching ``selector`` or raise StructuralTimeout.

        The fetcher already waited up to ``timeout`` while rendering, so the
        snapshot held here is final.
        """
        found = self.css(selector)
        if not found:
            raise StructuralTimeout(selector, timeout)
        return found
