"""Core module for microdata-graph."""

from core.models import (
    ExtractErrorCode,
    ExtractionLimits,
    ExtractOptions,
    Item,
    LimitKind,
    LimitPolicy,
    PropertyValue,
    Reference,
    UrlPolicy,
)
from core.config import ExtractionConfig

__all__ = [
    "ExtractErrorCode",
    "ExtractionLimits",
    "ExtractOptions",
    "Item",
    "LimitKind",
    "LimitPolicy",
    "PropertyValue",
    "Reference",
    "UrlPolicy",
    "ExtractionConfig",
]
