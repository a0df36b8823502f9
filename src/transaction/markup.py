"""Narrow markup query surface used by key extraction.

The derivation code only talks to ``MarkupDocument``; ``SoupDocument`` is the
BeautifulSoup backed implementation used at runtime.
"""

from __future__ import annotations

from typing import Any, Protocol

import bs4


class MarkupDocument(Protocol):
    def source(self) -> str: ...

    def meta_content(self, name: str) -> str | None: ...

    def elements_by_id_prefix(self, prefix: str) -> list[Any]: ...

    def child_elements(self, node: Any) -> list[Any]: ...

    def attribute(self, node: Any, name: str) -> str | None: ...


class SoupDocument:
    """MarkupDocument over a parsed ``bs4.BeautifulSoup`` tree."""

    def __init__(self, soup: bs4.BeautifulSoup, source: str | None = None) -> None:
        if not isinstance(soup, bs4.BeautifulSoup):
            raise TypeError(f"soup must be BeautifulSoup, got: {type(soup).__name__}")
        self.soup = soup
        self._source = source if source is not None else str(soup)

    def source(self) -> str:
        return self._source

    def meta_content(self, name: str) -> str | None:
        element = self.soup.find("meta", attrs={"name": name})
        if element is None:
            return None
        return self.attribute(element, "content")

    def elements_by_id_prefix(self, prefix: str) -> list[bs4.Tag]:
        return [
            element
            for element in self.soup.find_all(id=True)
            if str(element.get("id", "")).startswith(prefix)
        ]

    def child_elements(self, node: bs4.Tag) -> list[bs4.Tag]:
        # Whitespace text nodes between tags are not children for our purposes.
        return [child for child in node.children if isinstance(child, bs4.Tag)]

    def attribute(self, node: bs4.Tag, name: str) -> str | None:
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def select_one(self, selector: str) -> bs4.Tag | None:
        return self.soup.select_one(selector)


def parse_home_page_html(html: str) -> SoupDocument:
    return SoupDocument(bs4.BeautifulSoup(html, "html.parser"), source=html)
