"""Minimal CLI entrypoint for microdata-graph."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence
from uuid import uuid4

from core.models import ExtractOptions, LimitKind, LimitPolicy
from core.structured_logging import emit_json_event
from extractor import LimitExceededError, parse_microdata
from microdata_graph import __version__
from parser.jsonld import inject_json_ld, render_json_ld


def _emit_cli_event(
    event_type: str,
    *,
    run_id: str,
    command: str,
    level: str = "info",
    **payload: Any,
) -> str:
    """Emit one structured CLI event line on stderr with standard fields."""
    return emit_json_event(
        event_type=event_type,
        run_id=run_id,
        level=level,
        stream=sys.stderr,
        command=command,
        **payload,
    )


def _read_input(path_arg: str) -> str:
    """Read markup from a file path, or stdin for '-'."""
    if path_arg == "-":
        return sys.stdin.read()
    path = Path(path_arg)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


_LIMIT_FLAGS = (
    "max_html_length",
    "max_items",
    "max_item_ref_ids",
    "max_property_elements_per_item",
    "max_total_property_elements",
    "max_item_depth",
)


def _build_options(args: argparse.Namespace) -> ExtractOptions:
    """Map CLI flags onto ExtractOptions."""
    limit_overrides = {
        name: getattr(args, name) for name in _LIMIT_FLAGS if getattr(args, name) is not None
    }
    url_policy: dict[str, Any] = {
        "allow_relative": not args.disallow_relative,
        "allow_protocol_relative": args.allow_protocol_relative,
        "allow_unsafe_schemes": args.allow_unsafe_schemes,
    }
    if args.allowed_schemes:
        url_policy["allowed_schemes"] = args.allowed_schemes
    return ExtractOptions(
        base_url=args.base_url,
        compact=not args.no_compact,
        force_graph=args.force_graph,
        on_limit=LimitPolicy(args.on_limit),
        limits=None if args.no_limits else limit_overrides,
        url_policy=url_policy,
    )


def _truncate_logger(run_id: str, command: str):
    """Truncate hook reporting each breach as a warning event."""

    def _hook(kind: LimitKind, maximum: int, actual: int) -> None:
        _emit_cli_event(
            "microdata_limit_truncated",
            run_id=run_id,
            command=command,
            level="warning",
            kind=kind.value,
            max=maximum,
            actual=actual,
        )

    return _hook


def _extract(args: argparse.Namespace, run_id: str, html_text: str | None = None) -> dict[str, Any]:
    """Run one extraction with the options given on the command line."""
    if html_text is None:
        html_text = _read_input(args.input)
    return parse_microdata(
        html_text,
        _build_options(args),
        on_truncate=_truncate_logger(run_id, args.command),
    )


def _summary(payload: dict[str, Any]) -> dict[str, Any]:
    """Item count and context of a result payload, for logging."""
    if not payload:
        item_count = 0
    elif "@graph" in payload:
        item_count = len(payload["@graph"])
    else:
        item_count = 1
    return {"item_count": item_count, "context": payload.get("@context")}


def _cmd_extract(args: argparse.Namespace) -> int:
    """Extract the microdata graph of an HTML file and write it as JSON."""
    run_id = args.run_id
    payload = _extract(args, run_id)
    rendered = render_json_ld(payload) + "\n"

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered)

    _emit_cli_event(
        "cli_extract_completed",
        run_id=run_id,
        command="extract",
        input=args.input,
        output=args.output,
        **_summary(payload),
    )
    return 0


def _cmd_inject(args: argparse.Namespace) -> int:
    """Embed the extracted graph into the HTML head as a JSON-LD script."""
    run_id = args.run_id
    html_text = _read_input(args.input)
    payload = _extract(args, run_id, html_text)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(inject_json_ld(html_text, payload), encoding="utf-8")

    _emit_cli_event(
        "cli_inject_completed",
        run_id=run_id,
        command="inject",
        input=args.input,
        output=str(output_path),
        injected=bool(payload),
        **_summary(payload),
    )
    return 0


def _add_extraction_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags shared by every command that runs an extraction."""
    parser.add_argument("input", help="HTML file path, or '-' for stdin")
    parser.add_argument("--base-url", help="Absolute URL used to resolve relative itemids and URLs")
    parser.add_argument("--no-compact", action="store_true", help="Keep full vocabulary IRIs")
    parser.add_argument(
        "--force-graph",
        action="store_true",
        help="Always wrap items in @graph, even for a single item",
    )
    parser.add_argument(
        "--on-limit",
        choices=[policy.value for policy in LimitPolicy],
        default=LimitPolicy.FAIL.value,
        help="Fail or truncate when a resource ceiling is exceeded",
    )
    parser.add_argument("--no-limits", action="store_true", help="Disable every resource ceiling")
    for name in _LIMIT_FLAGS:
        parser.add_argument(
            "--" + name.replace("_", "-"),
            type=int,
            default=None,
            metavar="N",
            help=f"Override the {name.replace('_', ' ')} ceiling",
        )
    parser.add_argument(
        "--disallow-relative",
        action="store_true",
        help="Drop relative URL values (kept unresolved by default)",
    )
    parser.add_argument(
        "--allow-scheme",
        action="append",
        dest="allowed_schemes",
        metavar="SCHEME",
        help="Accept URL values of this scheme (repeatable; replaces the default allow-list)",
    )
    parser.add_argument(
        "--allow-protocol-relative",
        action="store_true",
        help="Keep //host/path URL values",
    )
    parser.add_argument(
        "--allow-unsafe-schemes",
        action="store_true",
        help="Keep URL values of any scheme (unsafe)",
    )
    parser.add_argument("--run-id", help="Optional explicit run ID for logging")


def build_parser() -> argparse.ArgumentParser:
    """Create argument parser for the microdata-graph CLI."""
    parser = argparse.ArgumentParser(
        prog="microdata-graph",
        description="Extract HTML microdata into a JSON-LD graph",
    )
    parser.add_argument("--version", action="version", version=f"microdata-graph {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    extract_parser = subparsers.add_parser(
        "extract",
        help="Write the microdata graph of an HTML document as JSON-LD",
    )
    _add_extraction_arguments(extract_parser)
    extract_parser.add_argument("--output", help="Output JSON path (default: stdout)")
    extract_parser.set_defaults(func=_cmd_extract)

    inject_parser = subparsers.add_parser(
        "inject",
        help="Embed the microdata graph into the document head",
    )
    _add_extraction_arguments(inject_parser)
    inject_parser.add_argument("--output", required=True, help="Output HTML path")
    inject_parser.set_defaults(func=_cmd_inject)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    args.run_id = args.run_id or str(uuid4())

    try:
        return int(args.func(args))
    except LimitExceededError as exc:
        _emit_cli_event(
            "cli_error",
            run_id=args.run_id,
            command=str(args.command),
            level="error",
            error_type=type(exc).__name__,
            error=str(exc),
            **exc.to_dict(),
        )
        return 1
    except Exception as exc:
        _emit_cli_event(
            "cli_error",
            run_id=args.run_id,
            command=str(args.command),
            level="error",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1


def cli() -> None:
    """Console-script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":
    raise SystemExit(main())
