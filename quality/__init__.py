"""Quality utilities: URL resolution and scheme-policy sanitization."""

from quality.urlnorm import is_absolute_url, parse_base_url, resolve_url, sanitize_url

__all__ = ["is_absolute_url", "parse_base_url", "resolve_url", "sanitize_url"]
