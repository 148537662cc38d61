"""Vocabulary normalization: schema.org rewriting, shared-base compaction."""

from __future__ import annotations

from typing import Iterable

from core.config import ExtractionConfig
from quality.urlnorm import is_absolute_url


SCHEMA_ORG_HTTP = ExtractionConfig.SCHEMA_ORG_HTTP
SCHEMA_ORG_HTTPS = ExtractionConfig.SCHEMA_ORG_HTTPS


def split_tokens(value: str | None) -> list[str]:
    """Whitespace-split an attribute value, dropping repeated tokens."""
    if not value:
        return []
    tokens: list[str] = []
    for token in value.split():
        if token not in tokens:
            tokens.append(token)
    return tokens


def normalize_schema_org(iri: str) -> str:
    """Rewrite the legacy http://schema.org/ root to https://schema.org/."""
    if iri.startswith(SCHEMA_ORG_HTTP):
        return SCHEMA_ORG_HTTPS + iri[len(SCHEMA_ORG_HTTP):]
    return iri


def normalize_types(value: str | None) -> list[str]:
    """Tokenize an itemtype value and canonicalize each type."""
    types: list[str] = []
    for token in split_tokens(value):
        normalized = normalize_schema_org(token)
        if normalized not in types:
            types.append(normalized)
    return types


def type_base(type_iri: str | None) -> str | None:
    """
    Vocabulary base of a type: everything up to the last '/' or '#'.

    Both schema.org roots map to the canonical https root. A type with no
    separator has no base.
    """
    if not type_iri:
        return None
    if type_iri.startswith(SCHEMA_ORG_HTTP) or type_iri.startswith(SCHEMA_ORG_HTTPS):
        return SCHEMA_ORG_HTTPS
    cut = max(type_iri.rfind("#"), type_iri.rfind("/"))
    if cut == -1:
        return None
    return type_iri[: cut + 1]


def shared_vocabulary_base(type_lists: Iterable[list[str]]) -> str | None:
    """
    The single vocabulary base used by every declared type, if any.

    Returns None when bases differ, when some type has no base, or when no
    type is declared at all.
    """
    bases: set[str] = set()
    for types in type_lists:
        for type_iri in types:
            base = type_base(type_iri)
            if base is None:
                return None
            bases.add(base)
    if len(bases) == 1:
        return next(iter(bases))
    return None


class Vocabulary:
    """Canonicalizes type and property identifiers for one extraction call.

    With a shared ``context_base`` identifiers under it are shortened to their
    local suffix; without one they stay absolute.
    """

    def __init__(self, context_base: str | None = None) -> None:
        self.context_base = context_base

    @property
    def context(self) -> str | None:
        """The @context value to emit, if compaction found a shared base."""
        if self.context_base is None:
            return None
        if self.context_base == SCHEMA_ORG_HTTPS:
            return ExtractionConfig.SCHEMA_ORG_CONTEXT
        return self.context_base

    def compact_iri(self, iri: str) -> str:
        if not self.context_base:
            return iri
        if self.context_base == SCHEMA_ORG_HTTPS:
            normalized = normalize_schema_org(iri)
            if normalized.startswith(SCHEMA_ORG_HTTPS):
                return normalized[len(SCHEMA_ORG_HTTPS):]
            return iri
        if iri.startswith(self.context_base):
            return iri[len(self.context_base):]
        return iri

    def normalize_type(self, type_iri: str) -> str:
        normalized = normalize_schema_org(type_iri)
        if self.context_base:
            return self.compact_iri(normalized)
        return normalized

    def normalize_property_name(self, token: str, item_types: list[str]) -> str:
        """
        Canonical key for an itemprop token on an item with item_types.

        Absolute tokens are compacted against the shared base. Local tokens
        stay local under a shared base; otherwise they are expanded with the
        owning item's own vocabulary base, when it declares a type.
        """
        if is_absolute_url(token):
            if self.context_base:
                return self.compact_iri(normalize_schema_org(token))
            return token
        if self.context_base:
            return token
        base = type_base(item_types[0]) if item_types else None
        if base:
            return base + token
        return token
