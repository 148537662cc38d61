"""Extractor package: microdata item graph extraction."""

from extractor.graph import GraphBuilder, extract_graph, parse_microdata, shape_result
from extractor.limits import LimitExceededError, LimitGuard

__all__ = [
    "GraphBuilder",
    "LimitExceededError",
    "LimitGuard",
    "extract_graph",
    "parse_microdata",
    "shape_result",
]
