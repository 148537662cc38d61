"""Read-only document tree adapter over a BeautifulSoup parse."""

from __future__ import annotations

from typing import Iterator

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString


class HtmlDocument:
    """Navigable element tree with id lookup and document-order comparison.

    Elements are bs4 ``Tag`` objects. Tags compare equal when their markup
    is equal, so every lookup here is keyed by object identity instead.
    The tree is never mutated.
    """

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        self._elements: list[Tag] = list(soup.find_all(True))
        self._positions: dict[int, int] = {
            id(element): index for index, element in enumerate(self._elements)
        }
        self._ids: dict[str, Tag] | None = None

    @classmethod
    def from_html(cls, html_text: str) -> "HtmlDocument":
        """Parse markup as a browser would; every attribute stays a plain string.

        html5lib runs the HTML5 tree-construction algorithm, so implied end
        tags (an open <p> closed by the next <p>, sibling <li>) produce the
        same tree a DOM would.
        """
        soup = BeautifulSoup(html_text, "html5lib", multi_valued_attributes=None)
        return cls(soup)

    def elements(self) -> list[Tag]:
        """All elements in document order (depth-first, pre-order)."""
        return list(self._elements)

    def descendants(self, element: Tag) -> Iterator[Tag]:
        """Descendant elements of element in document order, excluding itself."""
        for node in element.descendants:
            if isinstance(node, Tag):
                yield node

    def element_by_id(self, element_id: str) -> Tag | None:
        """First element in document order declaring id=element_id."""
        if self._ids is None:
            self._ids = {}
            for element in self._elements:
                value = self.attribute(element, "id")
                if value:
                    self._ids.setdefault(value, element)
        return self._ids.get(element_id)

    def position(self, element: Tag) -> int:
        """Index of element in document order."""
        return self._positions[id(element)]

    def compare(self, first: Tag, second: Tag) -> int:
        """Negative if first precedes second, positive if it follows, 0 if same."""
        return self.position(first) - self.position(second)

    def parent_element(self, element: Tag) -> Tag | None:
        """Parent element, or None at the top of the tree."""
        parent = element.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return parent

    @staticmethod
    def tag_name(element: Tag) -> str:
        return (element.name or "").lower()

    @staticmethod
    def has_attribute(element: Tag, name: str) -> bool:
        return element.has_attr(name)

    @staticmethod
    def attribute(element: Tag, name: str) -> str | None:
        value = element.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    @staticmethod
    def text_content(element: Tag) -> str:
        """Every descendant text node joined, script and style included (DOM textContent)."""
        return "".join(
            str(node)
            for node in element.descendants
            if isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
        )
