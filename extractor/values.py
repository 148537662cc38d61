"""Property value extraction per element kind, and value aggregation."""

from __future__ import annotations

import json
from typing import Any

from bs4 import Tag

from core.config import ExtractionConfig
from core.models import Item, PropertyValue, Reference, UrlPolicy
from parser.html import HtmlDocument
from quality.urlnorm import resolve_url, sanitize_url


_SRC_ELEMENTS = {"audio", "embed", "iframe", "img", "source", "track", "video"}
_HREF_ELEMENTS = {"a", "area", "link"}
_VALUE_ELEMENTS = {"data", "meter", "input"}


def _text_value(document: HtmlDocument, element: Tag) -> str | None:
    text = document.text_content(element).strip()
    return text or None


class ValueReader:
    """Reads the value a non-itemscope itemprop element contributes to its item.

    Item scope elements are not read here: the graph builder turns them into
    a Reference to the nested item.
    """

    def __init__(
        self,
        document: HtmlDocument,
        *,
        base_url: str | None,
        url_policy: UrlPolicy,
    ) -> None:
        self.document = document
        self.base_url = base_url
        self.url_policy = url_policy

    def _url_value(self, element: Tag, attribute: str) -> str | None:
        resolved = resolve_url(self.document.attribute(element, attribute), self.base_url)
        return sanitize_url(resolved, self.url_policy)

    def read(self, element: Tag) -> PropertyValue | None:
        """Value of element, or None when it contributes nothing."""
        document = self.document
        tag = document.tag_name(element)
        if tag == "meta":
            value = document.attribute(element, "content")
        elif tag in _SRC_ELEMENTS:
            value = self._url_value(element, "src")
        elif tag in _HREF_ELEMENTS:
            value = self._url_value(element, "href")
        elif tag == "object":
            value = self._url_value(element, "data")
        elif tag in _VALUE_ELEMENTS:
            value = document.attribute(element, "value")
        elif tag == "time":
            value = document.attribute(element, "datetime") or _text_value(document, element)
        else:
            value = _text_value(document, element)
        return value or None


# ============================================================================
# Aggregation
# ============================================================================

def value_key(value: Any) -> tuple[str, str]:
    """Equality key: text by exact string, references by id, else by structure."""
    if isinstance(value, Reference):
        return ("@id", value.id)
    if isinstance(value, str):
        return ("prim", value)
    if hasattr(value, "model_dump"):
        value = value.model_dump()
    return ("obj", json.dumps(value, sort_keys=True, default=str))


def dedupe_values(values: list[Any]) -> list[Any]:
    """Drop repeated values, keeping the first occurrence of each."""
    seen: set[tuple[str, str]] = set()
    unique: list[Any] = []
    for value in values:
        key = value_key(value)
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def is_reserved_key(key: str) -> bool:
    """Keys that must never become properties."""
    return key in ExtractionConfig.RESERVED_PROPERTY_KEYS or key.startswith("@")


def merge_property(properties: dict[str, PropertyValue], key: str, value: PropertyValue | None) -> None:
    """
    Merge value into properties[key].

    An absent key is set directly. Otherwise existing and new values are
    combined into one de-duplicated list in first-occurrence order, which
    collapses back to a scalar when a single value remains.
    """
    if value is None or is_reserved_key(key):
        return
    existing = properties.get(key)
    if existing is None:
        properties[key] = value
        return
    values = list(existing) if isinstance(existing, list) else [existing]
    if isinstance(value, list):
        values.extend(value)
    else:
        values.append(value)
    unique = dedupe_values(values)
    properties[key] = unique[0] if len(unique) == 1 else unique


def merge_types(item: Item, types: list[str]) -> None:
    """Merge canonical type identifiers into item.types without repeats."""
    if types:
        item.types = dedupe_values(item.types + types)
