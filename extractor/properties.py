"""Collects the elements contributing properties to one item."""

from __future__ import annotations

from functools import cmp_to_key

from bs4 import Tag

from core.models import LimitKind
from extractor.limits import LimitGuard
from extractor.vocabulary import split_tokens
from parser.html import HtmlDocument


class PropertyElementCollector:
    """
    Computes, per item element, its ordered itemprop elements.

    Candidates come from the item's own subtree and from the elements named
    by its itemref attribute. A candidate belongs to the item only when its
    nearest itemscope ancestor is the item itself (or it has none), so the
    properties of nested items never leak into their container.
    """

    def __init__(self, document: HtmlDocument, guard: LimitGuard) -> None:
        self.document = document
        self.guard = guard

    def referenced_elements(self, item_element: Tag) -> list[Tag]:
        """Elements named by itemref, capped; unknown ids are dropped."""
        ref_ids = split_tokens(self.document.attribute(item_element, "itemref"))
        if not self.guard.allows(LimitKind.MAX_ITEM_REF_IDS, len(ref_ids)):
            ref_ids = ref_ids[: self.guard.ceiling(LimitKind.MAX_ITEM_REF_IDS)]
        elements: list[Tag] = []
        for ref_id in ref_ids:
            element = self.document.element_by_id(ref_id)
            if element is not None:
                elements.append(element)
        return elements

    def in_scope(self, element: Tag, item_element: Tag) -> bool:
        """True when element's nearest itemscope ancestor is item_element."""
        current = self.document.parent_element(element)
        while current is not None:
            if self.document.has_attribute(current, "itemscope"):
                return current is item_element
            current = self.document.parent_element(current)
        return True

    def _admit(self, seen_for_item: int) -> bool:
        """Count one more itemprop element against both ceilings."""
        if not self.guard.allows(LimitKind.MAX_PROPERTY_ELEMENTS_PER_ITEM, seen_for_item + 1):
            return False
        if not self.guard.allows(
            LimitKind.MAX_TOTAL_PROPERTY_ELEMENTS, self.guard.total_property_elements + 1
        ):
            return False
        self.guard.total_property_elements += 1
        return True

    def collect(self, item_element: Tag) -> list[Tag]:
        """Property elements of item_element, in document order."""
        document = self.document
        roots = [item_element, *self.referenced_elements(item_element)]
        candidates: dict[int, Tag] = {}
        seen_for_item = 0
        stopped = False

        for root in roots:
            if root is not item_element and document.has_attribute(root, "itemprop"):
                if not self._admit(seen_for_item):
                    break
                seen_for_item += 1
                if self.in_scope(root, item_element):
                    candidates.setdefault(id(root), root)

            for element in document.descendants(root):
                if not document.has_attribute(element, "itemprop"):
                    continue
                if not self._admit(seen_for_item):
                    stopped = True
                    break
                seen_for_item += 1
                # itemref may point at an ancestor of the item itself.
                if element is item_element or not self.in_scope(element, item_element):
                    continue
                candidates.setdefault(id(element), element)
            if stopped:
                break

        return sorted(candidates.values(), key=cmp_to_key(document.compare))
