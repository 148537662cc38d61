"""
Core Pydantic models for microdata-graph.

Design principles:
- Options are explicitly typed and validated once, before extraction starts
- Everything here is created per call and discarded on return (no shared state)
- Property values are a closed union: text, a Reference, or a list of those
- Serialization is deterministic (first-occurrence order, JSON-LD keywords)
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import ExtractionConfig


# ============================================================================
# Enums
# ============================================================================

class ExtractErrorCode(str, Enum):
    """Stable discriminators for structured extraction failures."""
    LIMIT_EXCEEDED = "MICRODATA_LIMIT_EXCEEDED"


class LimitKind(str, Enum):
    """Which ceiling was breached."""
    MAX_HTML_LENGTH = "maxHtmlLength"
    MAX_ITEMS = "maxItems"
    MAX_ITEM_REF_IDS = "maxItemRefIds"
    MAX_PROPERTY_ELEMENTS_PER_ITEM = "maxPropertyElementsPerItem"
    MAX_TOTAL_PROPERTY_ELEMENTS = "maxTotalPropertyElements"
    MAX_ITEM_DEPTH = "maxItemDepth"


class LimitPolicy(str, Enum):
    """What to do when a ceiling is breached."""
    FAIL = "fail"  # abort the whole call with LimitExceededError
    TRUNCATE = "truncate"  # stop collecting that kind, keep the partial graph


# ============================================================================
# Property values
# ============================================================================

class Reference(BaseModel):
    """
    Pointer from a property value to another Item in the same graph.

    Serialized as {"@id": "<item id>"}.
    """
    model_config = ConfigDict(frozen=True)

    id: str

    def to_json_ld(self) -> Dict[str, str]:
        return {"@id": self.id}


Primitive = str
PropertyValue = Union[Primitive, Reference, List[Union[Primitive, Reference]]]


# ============================================================================
# Item (graph node)
# ============================================================================

class Item(BaseModel):
    """
    One logical entity extracted from an annotated subtree.

    Several elements declaring the same itemid share one Item; later
    builds merge their types and properties into it.

    Example:
      id = "_:b1"
      types = ["Product"]
      properties = {"name": "Widget", "offers": Reference(id="_:b2")}
    """
    id: str
    types: List[str] = Field(default_factory=list)
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)

    def to_json_ld(self) -> Dict[str, Any]:
        """Render as a JSON-LD node object (@id, @type, then properties)."""
        node: Dict[str, Any] = {"@id": self.id}
        if self.types:
            node["@type"] = self.types[0] if len(self.types) == 1 else list(self.types)
        for key, value in self.properties.items():
            node[key] = _value_to_json_ld(value)
        return node


def _value_to_json_ld(value: PropertyValue) -> Any:
    if isinstance(value, Reference):
        return value.to_json_ld()
    if isinstance(value, list):
        return [_value_to_json_ld(entry) for entry in value]
    return value


# ============================================================================
# Per-call configuration
# ============================================================================

class ExtractionLimits(BaseModel):
    """
    Ceilings guarding against resource exhaustion on hostile markup.

    A field set to None is unbounded.
    """
    max_html_length: Optional[int] = Field(default=ExtractionConfig.MAX_HTML_LENGTH, ge=0)
    max_items: Optional[int] = Field(default=ExtractionConfig.MAX_ITEMS, ge=0)
    max_item_ref_ids: Optional[int] = Field(default=ExtractionConfig.MAX_ITEM_REF_IDS, ge=0)
    max_property_elements_per_item: Optional[int] = Field(
        default=ExtractionConfig.MAX_PROPERTY_ELEMENTS_PER_ITEM, ge=0
    )
    max_total_property_elements: Optional[int] = Field(
        default=ExtractionConfig.MAX_TOTAL_PROPERTY_ELEMENTS, ge=0
    )
    max_item_depth: Optional[int] = Field(default=ExtractionConfig.MAX_ITEM_DEPTH, ge=0)

    @classmethod
    def unbounded(cls) -> "ExtractionLimits":
        """Limits with every ceiling disabled."""
        return cls(
            max_html_length=None,
            max_items=None,
            max_item_ref_ids=None,
            max_property_elements_per_item=None,
            max_total_property_elements=None,
            max_item_depth=None,
        )

    def ceiling(self, kind: LimitKind) -> Optional[int]:
        """Return the configured maximum for a limit kind."""
        return getattr(self, _LIMIT_FIELDS[kind])


_LIMIT_FIELDS: Dict[LimitKind, str] = {
    LimitKind.MAX_HTML_LENGTH: "max_html_length",
    LimitKind.MAX_ITEMS: "max_items",
    LimitKind.MAX_ITEM_REF_IDS: "max_item_ref_ids",
    LimitKind.MAX_PROPERTY_ELEMENTS_PER_ITEM: "max_property_elements_per_item",
    LimitKind.MAX_TOTAL_PROPERTY_ELEMENTS: "max_total_property_elements",
    LimitKind.MAX_ITEM_DEPTH: "max_item_depth",
}


class UrlPolicy(BaseModel):
    """Which URL values read from src/href/data attributes are kept."""
    allowed_schemes: List[str] = Field(
        default_factory=lambda: list(ExtractionConfig.ALLOWED_URL_SCHEMES)
    )
    allow_relative: bool = ExtractionConfig.ALLOW_RELATIVE_URLS
    allow_protocol_relative: bool = ExtractionConfig.ALLOW_PROTOCOL_RELATIVE_URLS
    allow_unsafe_schemes: bool = ExtractionConfig.ALLOW_UNSAFE_URL_SCHEMES

    @field_validator("allowed_schemes")
    @classmethod
    def normalize_schemes(cls, v: List[str]) -> List[str]:
        """Lowercase schemes, drop a trailing colon and duplicates."""
        schemes: List[str] = []
        for scheme in v:
            normalized = scheme.strip().lower().rstrip(":")
            if normalized and normalized not in schemes:
                schemes.append(normalized)
        return schemes


class ExtractOptions(BaseModel):
    """
    Options for one extraction call.

    limits accepts an ExtractionLimits, a partial mapping of overrides
    (merged onto the defaults), or None/False to disable every ceiling.
    url_policy accepts an UrlPolicy or a partial mapping of overrides.
    """
    base_url: Optional[str] = None
    compact: bool = True
    force_graph: bool = False
    on_limit: LimitPolicy = LimitPolicy.FAIL
    limits: ExtractionLimits = Field(default_factory=ExtractionLimits)
    url_policy: UrlPolicy = Field(default_factory=UrlPolicy)

    @field_validator("limits", mode="before")
    @classmethod
    def disable_limits(cls, v: Any) -> Any:
        """Treat None/False as "no limits"."""
        if v is None or v is False:
            return ExtractionLimits.unbounded()
        return v

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "base_url": "https://example.com/products/widget",
                    "compact": True,
                    "force_graph": False,
                    "on_limit": "truncate",
                    "limits": {"max_items": 500},
                    "url_policy": {"allow_relative": False},
                }
            ]
        }
