"""End-to-end limit enforcement through parse_microdata."""

from __future__ import annotations

import pytest

from core.models import LimitKind
from extractor import LimitExceededError, parse_microdata


TWO_ITEMS = """
<div itemscope><span itemprop="name">one</span></div>
<div itemscope><span itemprop="name">two</span></div>
"""

NESTED = """
<div itemscope>
  <span itemprop="name">Outer</span>
  <div itemprop="child" itemscope><span itemprop="name">Inner</span></div>
</div>
"""


def _recorder():
    calls = []

    def _hook(kind, maximum, actual):
        calls.append((kind, maximum, actual))

    return calls, _hook


@pytest.mark.integration
def test_item_ceiling_fails_by_default():
    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(TWO_ITEMS, {"limits": {"max_items": 1}})

    assert excinfo.value.to_dict() == {
        "code": "MICRODATA_LIMIT_EXCEEDED",
        "kind": "maxItems",
        "max": 1,
        "actual": 2,
    }


@pytest.mark.integration
def test_item_ceiling_truncates_discovery():
    calls, hook = _recorder()
    payload = parse_microdata(
        TWO_ITEMS,
        {"limits": {"max_items": 1}, "on_limit": "truncate"},
        on_truncate=hook,
    )

    assert payload == {"@id": "_:b1", "name": "one"}
    assert calls == [(LimitKind.MAX_ITEMS, 1, 2)]


@pytest.mark.integration
def test_itemref_ids_are_capped():
    markup = """
    <span id="p1" itemprop="a">1</span>
    <span id="p2" itemprop="b">2</span>
    <div itemscope itemref="p1 p2"></div>
    """
    calls, hook = _recorder()
    payload = parse_microdata(
        markup,
        {"limits": {"max_item_ref_ids": 1}, "on_limit": "truncate"},
        on_truncate=hook,
    )

    assert payload == {"@id": "_:b1", "a": "1"}
    assert calls == [(LimitKind.MAX_ITEM_REF_IDS, 1, 2)]

    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(markup, {"limits": {"max_item_ref_ids": 1}})
    assert excinfo.value.kind == LimitKind.MAX_ITEM_REF_IDS


@pytest.mark.integration
def test_property_elements_per_item_are_capped():
    markup = """
    <div itemscope>
      <span itemprop="a">1</span><span itemprop="b">2</span><span itemprop="c">3</span>
    </div>
    """
    options = {"limits": {"max_property_elements_per_item": 2}}

    truncated = parse_microdata(markup, {**options, "on_limit": "truncate"})
    assert truncated == {"@id": "_:b1", "a": "1", "b": "2"}

    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(markup, options)
    assert excinfo.value.kind == LimitKind.MAX_PROPERTY_ELEMENTS_PER_ITEM
    assert excinfo.value.actual == 3


@pytest.mark.integration
def test_total_property_elements_are_capped_across_items():
    markup = """
    <div itemscope><span itemprop="a">1</span><span itemprop="b">2</span></div>
    <div itemscope><span itemprop="c">3</span><span itemprop="d">4</span></div>
    """
    calls, hook = _recorder()
    payload = parse_microdata(
        markup,
        {"limits": {"max_total_property_elements": 3}, "on_limit": "truncate"},
        on_truncate=hook,
    )

    assert payload == {
        "@graph": [
            {"@id": "_:b1", "a": "1", "b": "2"},
            {"@id": "_:b2", "c": "3"},
        ]
    }
    assert calls == [(LimitKind.MAX_TOTAL_PROPERTY_ELEMENTS, 3, 4)]


@pytest.mark.integration
def test_markup_length_is_checked_before_parsing():
    markup = "<div itemscope></div>"
    options = {"limits": {"max_html_length": 10}}

    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(markup, options)
    assert excinfo.value.kind == LimitKind.MAX_HTML_LENGTH
    assert excinfo.value.actual == len(markup)

    assert parse_microdata(markup, {**options, "on_limit": "truncate"}) == {}


@pytest.mark.integration
def test_item_depth_ceiling_drops_the_nested_reference():
    """The nested item is still discovered on its own; only the link is cut."""
    payload = parse_microdata(NESTED, {"limits": {"max_item_depth": 1}, "on_limit": "truncate"})

    assert payload == {
        "@graph": [
            {"@id": "_:b1", "name": "Outer"},
            {"@id": "_:b2", "name": "Inner"},
        ]
    }

    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(NESTED, {"limits": {"max_item_depth": 1}})
    assert excinfo.value.kind == LimitKind.MAX_ITEM_DEPTH
    assert (excinfo.value.maximum, excinfo.value.actual) == (1, 2)


@pytest.mark.integration
def test_deep_nesting_without_limits_builds_every_level():
    depth = 600
    markup = "<div itemscope>" + "<div itemprop=\"child\" itemscope>" * (depth - 1) + "</div>" * depth

    payload = parse_microdata(markup, {"limits": None})

    graph = payload["@graph"]
    assert len(graph) == depth
    assert graph[0] == {"@id": "_:b1", "child": {"@id": "_:b2"}}
    assert graph[-2] == {"@id": f"_:b{depth - 1}", "child": {"@id": f"_:b{depth}"}}
    assert graph[-1] == {"@id": f"_:b{depth}"}


@pytest.mark.integration
def test_default_depth_ceiling_stops_deep_nesting():
    markup = "<div itemscope>" + "<div itemprop=\"child\" itemscope>" * 250 + "</div>" * 251

    with pytest.raises(LimitExceededError) as excinfo:
        parse_microdata(markup)
    assert excinfo.value.kind == LimitKind.MAX_ITEM_DEPTH
    assert (excinfo.value.maximum, excinfo.value.actual) == (200, 201)


@pytest.mark.integration
@pytest.mark.parametrize("disabled", [None, False])
def test_disabled_limits_allow_everything(disabled):
    markup = "".join(f'<div itemscope><span itemprop="n">{i}</span></div>' for i in range(30))
    payload = parse_microdata(markup, {"limits": disabled})
    assert len(payload["@graph"]) == 30
