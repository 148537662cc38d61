"""Parser package: document tree adapter and JSON-LD embedding."""

from parser.html import HtmlDocument
from parser.jsonld import extract_jsonld_blocks, inject_json_ld, render_json_ld

__all__ = ["HtmlDocument", "extract_jsonld_blocks", "inject_json_ld", "render_json_ld"]
