"""
Default extraction configuration for microdata-graph.

These settings are IMMUTABLE defaults. Every extraction call may override
limits and URL policy through ExtractOptions; nothing here is mutated at
runtime.

Design: defaults are sized for real product/article pages while keeping
hostile markup (millions of itemprops, huge itemref lists) bounded.
"""

from typing import FrozenSet, Tuple


class ExtractionConfig:
    """
    Immutable default settings for graph extraction.
    """

    # ========================================================================
    # Resource Ceilings
    # ========================================================================

    MAX_HTML_LENGTH: int = 10_000_000
    """Max characters of raw markup accepted before parsing."""

    MAX_ITEMS: int = 10_000
    """Max itemscope elements discovered in one document."""

    MAX_ITEM_REF_IDS: int = 1_000
    """Max id tokens honoured in a single itemref attribute."""

    MAX_PROPERTY_ELEMENTS_PER_ITEM: int = 50_000
    """Max itemprop elements scanned while building one item."""

    MAX_TOTAL_PROPERTY_ELEMENTS: int = 200_000
    """Max itemprop elements scanned across the whole document."""

    MAX_ITEM_DEPTH: int = 200
    """Max nesting depth of item scopes built recursively."""

    # ========================================================================
    # URL Policy
    # ========================================================================

    # Values read from src/href/data are embedded verbatim into pages, so
    # script-capable schemes (javascript:, data:, vbscript:) never pass.
    ALLOWED_URL_SCHEMES: Tuple[str, ...] = ("http", "https", "mailto", "tel")
    """Schemes accepted for absolute URL values."""

    ALLOW_RELATIVE_URLS: bool = True
    """Keep relative references (left unresolved when no base URL is known)."""

    ALLOW_PROTOCOL_RELATIVE_URLS: bool = False
    """Keep //host/path references."""

    ALLOW_UNSAFE_URL_SCHEMES: bool = False
    """Bypass every URL check."""

    # ========================================================================
    # Vocabulary
    # ========================================================================

    SCHEMA_ORG_HTTP: str = "http://schema.org/"
    """Legacy schema.org root, rewritten to the secure form."""

    SCHEMA_ORG_HTTPS: str = "https://schema.org/"
    """Canonical schema.org root."""

    SCHEMA_ORG_CONTEXT: str = "https://schema.org"
    """@context value emitted when every item uses schema.org."""

    BLANK_NODE_PREFIX: str = "_:b"
    """Prefix of synthesized item identifiers."""

    # Keys that would shadow object behaviour for JS consumers of the
    # payload. @-prefixed JSON-LD keywords are rejected as well.
    RESERVED_PROPERTY_KEYS: FrozenSet[str] = frozenset({"__proto__", "constructor", "prototype"})
    """Property names never written to an item."""

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration at startup.

        Raises:
            AssertionError: If any constraint is violated.
        """
        for name in (
            "MAX_HTML_LENGTH",
            "MAX_ITEMS",
            "MAX_ITEM_REF_IDS",
            "MAX_PROPERTY_ELEMENTS_PER_ITEM",
            "MAX_TOTAL_PROPERTY_ELEMENTS",
            "MAX_ITEM_DEPTH",
        ):
            assert getattr(cls, name) > 0, f"{name} must be > 0"

        assert (
            cls.MAX_PROPERTY_ELEMENTS_PER_ITEM <= cls.MAX_TOTAL_PROPERTY_ELEMENTS
        ), "MAX_PROPERTY_ELEMENTS_PER_ITEM must be <= MAX_TOTAL_PROPERTY_ELEMENTS"

        assert all(
            scheme == scheme.lower() and not scheme.endswith(":")
            for scheme in cls.ALLOWED_URL_SCHEMES
        ), "ALLOWED_URL_SCHEMES must be lowercase scheme names without ':'"

        assert "javascript" not in cls.ALLOWED_URL_SCHEMES, "javascript: must never be allowed"

        assert (
            cls.ALLOW_UNSAFE_URL_SCHEMES is False
        ), "ALLOW_UNSAFE_URL_SCHEMES must default to False"

        assert cls.SCHEMA_ORG_HTTPS.startswith("https://"), "SCHEMA_ORG_HTTPS must be https"
        assert cls.SCHEMA_ORG_HTTPS.rstrip("/") == cls.SCHEMA_ORG_CONTEXT


# Validate at module import time
ExtractionConfig.validate()
