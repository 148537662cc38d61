"""Unit tests for quality/urlnorm.py."""

from __future__ import annotations

import pytest

from core.models import UrlPolicy
from quality.urlnorm import is_absolute_url, parse_base_url, resolve_url, sanitize_url


@pytest.mark.unit
def test_resolve_relative_against_base():
    assert resolve_url("/img/a.png", "https://example.com/shop/") == "https://example.com/img/a.png"
    assert resolve_url("a.png", "https://example.com/shop/") == "https://example.com/shop/a.png"


@pytest.mark.unit
def test_resolve_without_base_passes_through():
    assert resolve_url("a.png", None) == "a.png"
    assert resolve_url(None, "https://example.com/") is None
    assert resolve_url("", "https://example.com/") is None


@pytest.mark.unit
def test_resolve_keeps_absolute_reference_of_other_scheme():
    assert resolve_url("mailto:ada@example.org", "https://example.com/") == "mailto:ada@example.org"


@pytest.mark.unit
def test_resolve_returns_malformed_value_unresolved():
    assert resolve_url("http://[broken", "https://example.com/") == "http://[broken"


@pytest.mark.unit
def test_parse_base_url_rejects_relative_or_empty():
    assert parse_base_url("https://example.com/x") == "https://example.com/x"
    assert parse_base_url("  https://example.com/x  ") == "https://example.com/x"
    assert parse_base_url("/relative/path") is None
    assert parse_base_url("") is None
    assert parse_base_url(None) is None


@pytest.mark.unit
def test_is_absolute_url():
    assert is_absolute_url("https://schema.org/name")
    assert is_absolute_url("urn:isbn:0451450523")
    assert not is_absolute_url("name")
    assert not is_absolute_url("/path")
    assert not is_absolute_url("http://[broken")


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [
        "https://example.com/a",
        "http://example.com/a",
        "mailto:ada@example.org",
        "tel:+441234",
        "HTTPS://EXAMPLE.COM/",
    ],
)
def test_sanitize_accepts_allowed_schemes(value):
    assert sanitize_url(value, UrlPolicy()) == value


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [
        "javascript:alert(1)",
        "JaVaScRiPt:alert(1)",
        " javascript:alert(1)",
        "java\tscript:alert(1)",
        "java\nscript:alert(1)",
        "data:text/html,<script>alert(1)</script>",
        "vbscript:msgbox",
    ],
)
def test_sanitize_rejects_unsafe_schemes(value):
    assert sanitize_url(value, UrlPolicy()) is None


@pytest.mark.unit
def test_sanitize_protocol_relative_requires_opt_in():
    assert sanitize_url("//cdn.example.com/a.png", UrlPolicy()) is None
    assert sanitize_url("/\\cdn.example.com/a.png", UrlPolicy()) is None
    allowed = UrlPolicy(allow_protocol_relative=True)
    assert sanitize_url("//cdn.example.com/a.png", allowed) == "//cdn.example.com/a.png"


@pytest.mark.unit
def test_sanitize_relative_follows_policy():
    assert sanitize_url("images/a.png", UrlPolicy()) == "images/a.png"
    assert sanitize_url("images/a.png", UrlPolicy(allow_relative=False)) is None


@pytest.mark.unit
def test_sanitize_unsafe_override_bypasses_checks():
    policy = UrlPolicy(allow_unsafe_schemes=True)
    assert sanitize_url("javascript:alert(1)", policy) == "javascript:alert(1)"
    assert sanitize_url("//cdn.example.com/a.png", policy) == "//cdn.example.com/a.png"


@pytest.mark.unit
def test_sanitize_custom_scheme_allow_list():
    policy = UrlPolicy(allowed_schemes=["FTP:", "https"])
    assert policy.allowed_schemes == ["ftp", "https"]
    assert sanitize_url("ftp://files.example.com/a", policy) == "ftp://files.example.com/a"
    assert sanitize_url("http://example.com/", policy) is None


@pytest.mark.unit
def test_sanitize_empty_values():
    assert sanitize_url(None, UrlPolicy()) is None
    assert sanitize_url("", UrlPolicy()) is None
    assert sanitize_url("   ", UrlPolicy()) is None
