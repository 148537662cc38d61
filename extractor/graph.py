"""Item graph construction: discovery, identity, nesting, result shaping."""

from __future__ import annotations

from typing import Any, Generator, Mapping

from bs4 import Tag

from core.config import ExtractionConfig
from core.models import ExtractOptions, Item, LimitKind, Reference
from extractor.limits import LimitGuard, TruncateHook
from extractor.properties import PropertyElementCollector
from extractor.values import ValueReader, merge_property, merge_types
from extractor.vocabulary import Vocabulary, normalize_types, shared_vocabulary_base, split_tokens
from parser.html import HtmlDocument
from quality.urlnorm import parse_base_url, resolve_url


OptionsInput = ExtractOptions | Mapping[str, Any] | None


def _coerce_options(options: OptionsInput) -> ExtractOptions:
    if options is None:
        return ExtractOptions()
    if isinstance(options, ExtractOptions):
        return options
    return ExtractOptions.model_validate(dict(options))


class GraphBuilder:
    """
    Builds the item graph of one document.

    One builder serves one extraction call: identifiers, the element to item
    association and all counters live here and are discarded with it.

    Blank identifiers are allocated in build order: discovered items in
    document order, with nested items numbered at the point their containing
    property is read.
    """

    def __init__(
        self,
        document: HtmlDocument,
        options: OptionsInput = None,
        on_truncate: TruncateHook | None = None,
    ) -> None:
        self.document = document
        self.options = _coerce_options(options)
        self.base_url = parse_base_url(self.options.base_url)
        self.guard = LimitGuard(self.options.limits, self.options.on_limit, on_truncate)
        self.collector = PropertyElementCollector(document, self.guard)
        self.reader = ValueReader(
            document,
            base_url=self.base_url,
            url_policy=self.options.url_policy,
        )
        self.vocabulary = Vocabulary()
        self.items: dict[str, Item] = {}
        self._element_ids: dict[int, str] = {}
        # An element is registered here when its build starts, so re-entry
        # through a reference cycle returns the partial item.
        self._element_items: dict[int, Item] = {}
        self._blank_counter = 0

    def discover_items(self) -> list[Tag]:
        """Every itemscope element in document order, up to the item ceiling."""
        found: list[Tag] = []
        for element in self.document.elements():
            if not self.document.has_attribute(element, "itemscope"):
                continue
            if not self.guard.allows(LimitKind.MAX_ITEMS, len(found) + 1):
                break
            found.append(element)
        return found

    def item_id(self, element: Tag) -> str:
        """Resolved itemid, or a blank identifier assigned once per element."""
        key = id(element)
        cached = self._element_ids.get(key)
        if cached is not None:
            return cached
        declared = self.document.attribute(element, "itemid")
        if declared:
            item_id = resolve_url(declared, self.base_url) or declared
        else:
            self._blank_counter += 1
            item_id = f"{ExtractionConfig.BLANK_NODE_PREFIX}{self._blank_counter}"
        self._element_ids[key] = item_id
        return item_id

    def build_item(self, element: Tag) -> Item:
        """
        Build (or merge into) the item for an itemscope element.

        Nested item scopes are built depth-first on an explicit stack of
        builds, so deep nesting never grows the interpreter stack. A nested
        item is built at the point its containing property is read, which
        keeps blank identifiers in build order.
        """
        builds: list[Generator[Tag, Item | None, Item]] = [self._item_steps(element)]
        sent: Item | None = None
        while True:
            try:
                nested_element = builds[-1].send(sent)
            except StopIteration as finished:
                builds.pop()
                if not builds:
                    return finished.value
                sent = finished.value
                continue
            sent = self._element_items.get(id(nested_element))
            if sent is not None:
                continue
            if self.guard.allows(LimitKind.MAX_ITEM_DEPTH, len(builds) + 1):
                builds.append(self._item_steps(nested_element))

    def _item_steps(self, element: Tag) -> Generator[Tag, Item | None, Item]:
        """
        One item build. Yields each nested itemscope property element and
        receives its built Item (None when it may not be built).
        """
        key = id(element)
        started = self._element_items.get(key)
        if started is not None:
            return started

        item_id = self.item_id(element)
        item = self.items.get(item_id)
        if item is None:
            item = Item(id=item_id)
            self.items[item_id] = item
        self._element_items[key] = item

        declared_types = normalize_types(self.document.attribute(element, "itemtype"))
        merge_types(item, [self.vocabulary.normalize_type(t) for t in declared_types])

        for prop_element in self.collector.collect(element):
            names = split_tokens(self.document.attribute(prop_element, "itemprop"))
            if not names:
                continue
            if self.document.has_attribute(prop_element, "itemscope"):
                nested = yield prop_element
                value = Reference(id=nested.id) if nested is not None and nested.id else None
            else:
                value = self.reader.read(prop_element)
            if value is None:
                continue
            for name in names:
                prop_key = self.vocabulary.normalize_property_name(name, declared_types)
                merge_property(item.properties, prop_key, value)
        return item

    def build(self) -> list[Item]:
        """Discover and build every item; returns the graph in first-seen order."""
        roots = self.discover_items()
        if self.options.compact:
            base = shared_vocabulary_base(
                normalize_types(self.document.attribute(element, "itemtype"))
                for element in roots
            )
            self.vocabulary = Vocabulary(base)
        for element in roots:
            self.build_item(element)
        return list(self.items.values())

    def result(self) -> dict[str, Any]:
        """Build the graph and shape it into a JSON-LD payload."""
        return shape_result(self.build(), self.vocabulary, force_graph=self.options.force_graph)


def shape_result(items: list[Item], vocabulary: Vocabulary, force_graph: bool = False) -> dict[str, Any]:
    """
    Empty dict for an empty graph, a bare node for a single item (unless
    force_graph), otherwise {"@graph": [...]}; @context is added when
    compaction found a shared vocabulary.
    """
    if not items:
        return {}
    if len(items) == 1 and not force_graph:
        body = items[0].to_json_ld()
    else:
        body = {"@graph": [item.to_json_ld() for item in items]}
    context = vocabulary.context
    if context is None:
        return body
    return {"@context": context, **body}


def extract_graph(
    document: HtmlDocument,
    options: OptionsInput = None,
    *,
    on_truncate: TruncateHook | None = None,
) -> dict[str, Any]:
    """Extract the microdata graph of an already parsed document."""
    return GraphBuilder(document, options, on_truncate=on_truncate).result()


def parse_microdata(
    html_text: str,
    options: OptionsInput = None,
    *,
    on_truncate: TruncateHook | None = None,
) -> dict[str, Any]:
    """
    Parse raw markup and extract its microdata graph.

    Markup longer than max_html_length is rejected before parsing: the fail
    policy raises LimitExceededError, truncate returns an empty result.
    """
    resolved = _coerce_options(options)
    guard = LimitGuard(resolved.limits, resolved.on_limit, on_truncate)
    if not guard.allows(LimitKind.MAX_HTML_LENGTH, len(html_text)):
        return {}
    document = HtmlDocument.from_html(html_text)
    return extract_graph(document, resolved, on_truncate=on_truncate)
