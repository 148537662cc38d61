"""Shared structured JSON logging helpers."""

from __future__ import annotations

import json
import sys
from datetime import UTC, datetime
from typing import Any, TextIO


def emit_json_event(
    event_type: str,
    *,
    run_id: str | None,
    level: str = "info",
    stream: TextIO | None = None,
    **payload: Any,
) -> str:
    """Emit one JSON event line and return the rendered line.

    Lines go to stdout unless another stream is given (the CLI uses stderr
    when the extracted graph itself is written to stdout).
    """
    event: dict[str, Any] = {
        "event_type": event_type,
        "level": level,
        "timestamp": datetime.now(UTC).isoformat(),
        "run_id": run_id,
    }
    event.update(payload)
    line = json.dumps(event, ensure_ascii=True, sort_keys=True, default=str)
    target = stream if stream is not None else sys.stdout
    target.write(line + "\n")
    target.flush()
    return line
