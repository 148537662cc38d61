"""
Shared pytest fixtures and configuration for microdata-graph tests.
"""

import json
from pathlib import Path

import pytest

from parser.html import HtmlDocument


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


# ============================================================================
# Fixtures: Files
# ============================================================================

@pytest.fixture
def load_html():
    """Load an HTML fixture by file name."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / "html" / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def graph_schema() -> dict:
    """JSON Schema for emitted payloads."""
    return json.loads((SCHEMAS_DIR / "microdata_graph.schema.json").read_text(encoding="utf-8"))


# ============================================================================
# Fixtures: Documents
# ============================================================================

@pytest.fixture
def make_document():
    """Build an HtmlDocument from inline markup."""

    def _make(markup: str) -> HtmlDocument:
        return HtmlDocument.from_html(markup)

    return _make


@pytest.fixture
def shop_base_url() -> str:
    """Base URL used by the product fixture."""
    return "https://shop.example.com/catalog/"


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "contract: contract schema compliance tests")
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
