"""CLI entry point for esswrapper."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from esswrapper.config.settings import EssSettings
from esswrapper.exceptions import EssWrapperError
from esswrapper.observability.logging import setup_logging
from esswrapper.query.filters import ExactMatch, InSet, must_filter
from esswrapper.wrapper import EssWrapper


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="esswrapper",
        description="esswrapper — Index and query documents on an Elasticsearch-style server",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Server host (overrides config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    parser.add_argument("--index", "-i", type=str, default=None, help="Target index (overrides config)")
    parser.add_argument(
        "--mapping-file",
        "-m",
        type=str,
        default=None,
        help="Mapping file applied if the index has to be created",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"esswrapper {_get_version()}")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Show server name and version")
    sub.add_parser("types", help="List document types in the index mapping")

    p = sub.add_parser("get", help="Fetch a document by id")
    p.add_argument("doc_type")
    p.add_argument("doc_id")

    p = sub.add_parser("add", help="Index a new document")
    p.add_argument("doc_type")
    p.add_argument("data", help="Document as a JSON object")
    p.add_argument("--id", dest="doc_id", default=None, help="Explicit document id")

    p = sub.add_parser("update", help="Overwrite a document")
    p.add_argument("doc_type")
    p.add_argument("doc_id")
    p.add_argument("data", help="Document as a JSON object")

    p = sub.add_parser("delete", help="Delete a document")
    p.add_argument("doc_type")
    p.add_argument("doc_id")

    p = sub.add_parser("find", help="Exact-term search on one field")
    p.add_argument("doc_type")
    p.add_argument("field")
    p.add_argument("value")

    p = sub.add_parser("search", help="Search with field filters combined by AND")
    p.add_argument("doc_type", nargs="?", default=None)
    p.add_argument(
        "--match",
        action="append",
        default=[],
        metavar="FIELD=VALUE[,VALUE...]",
        help="Field filter; comma-separated values match any of them",
    )
    p.add_argument("--size", type=int, default=None, help="Maximum number of hits")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.config and not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        settings = _load_settings(args)
        setup_logging(settings.observability)
        with _open_wrapper(settings) as ess:
            result = _run(ess, args)
    except (EssWrapperError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


def _load_settings(args: argparse.Namespace) -> EssSettings:
    """Load settings and apply CLI overrides, validating the result."""
    settings = EssSettings.from_yaml(args.config) if args.config else EssSettings()

    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.index:
        overrides["index"] = args.index
    if args.mapping_file:
        overrides["mapping_file"] = Path(args.mapping_file)
    if args.log_level:
        overrides["observability"] = {**settings.observability.model_dump(), "log_level": args.log_level}
    if not overrides:
        return settings
    return EssSettings(**{**settings.model_dump(), **overrides})


def _open_wrapper(settings: EssSettings) -> EssWrapper:
    return EssWrapper.from_settings(settings)


def _run(ess: EssWrapper, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "info":
        return ess.info().model_dump()
    if command == "types":
        return ess.get_types()
    if command == "get":
        return ess.get(args.doc_type, args.doc_id)
    if command == "add":
        return {"_id": ess.add(args.doc_type, _parse_json(args.data), args.doc_id)}
    if command == "update":
        ess.update(args.doc_type, args.doc_id, _parse_json(args.data))
        return {"_id": args.doc_id}
    if command == "delete":
        return {"deleted": ess.delete(args.doc_type, args.doc_id)}
    if command == "find":
        return ess.get_by_field(args.doc_type, args.field, args.value)
    if command == "search":
        return ess.search(args.doc_type, must_filter(_parse_matches(args.match)), size=args.size)
    raise ValueError(f"Unknown command: {command}")


def _parse_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON document: {e}") from e


def _parse_matches(matches: list[str]) -> dict[str, ExactMatch | InSet]:
    """Parse ``field=value`` and ``field=v1,v2`` arguments."""
    conditions: dict[str, ExactMatch | InSet] = {}
    for item in matches:
        field, sep, value = item.partition("=")
        if not sep or not field:
            raise ValueError(f"Invalid --match '{item}', expected FIELD=VALUE")
        if "," in value:
            conditions[field] = InSet(values=tuple(v for v in value.split(",") if v))
        else:
            conditions[field] = ExactMatch(value=value)
    return conditions


def _get_version() -> str:
    """Get the package version."""
    try:
        from esswrapper import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
