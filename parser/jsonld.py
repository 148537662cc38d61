"""JSON-LD payload rendering and embedding helpers for HTML documents."""

from __future__ import annotations

import json
from typing import Any

from bs4 import BeautifulSoup


JSON_LD_MIME = "application/ld+json"

# JSON text never uses these outside string literals, so escaping them keeps
# the payload inert inside a <script> element.
_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
}


def render_json_ld(payload: dict[str, Any], indent: int | None = 2) -> str:
    """Serialize a graph payload for embedding in a script element."""
    text = json.dumps(payload, indent=indent, ensure_ascii=False)
    for char, escaped in _SCRIPT_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def inject_json_ld(html_text: str, payload: dict[str, Any]) -> str:
    """
    Append a JSON-LD script carrying payload to the document head.

    The markup is parsed as a full HTML5 document, so a head always exists
    (implied when the markup has none) and the result is serialized as a
    complete document. An empty payload leaves the markup untouched.
    """
    if not payload or not html_text.strip():
        return html_text

    soup = BeautifulSoup(html_text, "html5lib")
    script = soup.new_tag("script", attrs={"type": JSON_LD_MIME})
    script.string = render_json_ld(payload)
    soup.head.append(script)
    return str(soup)


def extract_jsonld_blocks(html_text: str) -> list[Any]:
    """Parse every valid JSON-LD script payload already present in the markup."""
    soup = BeautifulSoup(html_text, "html5lib")
    blocks: list[Any] = []
    for script in soup.find_all("script"):
        script_type = (script.get("type") or "").strip().lower()
        if script_type != JSON_LD_MIME:
            continue
        raw_json = (script.string or "").strip()
        if not raw_json:
            continue
        try:
            blocks.append(json.loads(raw_json))
        except json.JSONDecodeError:
            continue
    return blocks
