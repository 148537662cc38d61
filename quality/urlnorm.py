"""URL resolution against a base and scheme-policy sanitization."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit

from core.models import UrlPolicy


# RFC 3986 scheme followed by ':'.
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
# Browsers drop ASCII tab/newline anywhere in a URL, so "java\tscript:" is
# still javascript: by the time it is followed.
_TAB_OR_NEWLINE_RE = re.compile(r"[\t\n\r]")
# Browsers also follow "/\host" and "\\host" as protocol-relative.
_PROTOCOL_RELATIVE_RE = re.compile(r"^[/\\]{2}")
_C0_CONTROL_OR_SPACE = "".join(chr(code) for code in range(0x21))


def _scheme_of(value: str) -> str | None:
    """Return the lowercase scheme of an absolute URL, or None."""
    match = _SCHEME_RE.match(value)
    if not match:
        return None
    try:
        urlsplit(value)
    except ValueError:
        return None
    return match.group(1).lower()


def is_absolute_url(value: str) -> bool:
    """True when value parses as an absolute URL (has a scheme)."""
    return _scheme_of(value) is not None


def parse_base_url(value: str | None) -> str | None:
    """Return value if usable as a resolution base, else None."""
    if not value:
        return None
    candidate = value.strip()
    if not is_absolute_url(candidate):
        return None
    return candidate


def resolve_url(value: str | None, base_url: str | None) -> str | None:
    """
    Resolve a reference against base_url.

    Without a base the value passes through unchanged. Values that fail to
    resolve are returned as declared rather than dropped.
    """
    if not value:
        return None
    if not base_url:
        return value
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value


def sanitize_url(value: str | None, policy: UrlPolicy) -> str | None:
    """
    Apply the URL policy to a value read from src/href/data.

    Rules:
    - allow_unsafe_schemes bypasses every check
    - //host references pass only with allow_protocol_relative
    - absolute URLs pass only when their scheme is allowed
    - anything else is relative and passes only with allow_relative

    Rejected values become None; this never raises.
    """
    if not value:
        return None
    if policy.allow_unsafe_schemes:
        return value

    raw = value.strip(_C0_CONTROL_OR_SPACE)
    raw = _TAB_OR_NEWLINE_RE.sub("", raw)
    if not raw:
        return None

    if _PROTOCOL_RELATIVE_RE.match(raw):
        return raw if policy.allow_protocol_relative else None

    if _SCHEME_RE.match(raw):
        scheme = _scheme_of(raw)
        if scheme is None or scheme not in policy.allowed_schemes:
            return None
        return raw

    return raw if policy.allow_relative else None
