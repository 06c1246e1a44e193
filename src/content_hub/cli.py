"""Command line interface: build, query, audit and serve the content tree."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
from typing import Any

import orjson
from pydantic import ValidationError

from content_hub.config import Settings
from content_hub.content.audit import audit_programs, determine_exit_code, format_report
from content_hub.observability.logging import configure_logging
from content_hub.observability.tracing import init_tracing
from content_hub.search.indexer import IndexBuilder
from content_hub.service_layer.search_service import SearchService
from content_hub.services.cache_service import ContentStore
from content_hub.services.related_service import RelatedScorer, RelatedService


logger = logging.getLogger(__name__)


def _emit(payload: Any) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if getattr(args, "content_root", None):
        overrides["content_root"] = str(args.content_root)
    if getattr(args, "index", None):
        overrides["index_path"] = str(args.index)
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    return Settings(**overrides)


def cmd_build_index(args: argparse.Namespace, settings: Settings) -> int:
    store = ContentStore.from_settings(settings)
    builder = IndexBuilder(
        store,
        snippet_length=settings.snippet_length,
        word_window=settings.snippet_word_window,
    )
    output = Path(args.output).expanduser().resolve() if args.output else settings.index_file()
    result = builder.build(output)
    _emit(
        {
            "documents_indexed": result.documents_indexed,
            "output_path": str(result.output_path),
            "generated_at": result.generated_at,
        }
    )
    return 0


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    service = SearchService.from_settings(settings)
    response = asyncio.run(service.search(args.query, types=args.types, limit=args.limit))
    _emit(response.to_payload())
    return 0


def cmd_related(args: argparse.Namespace, settings: Settings) -> int:
    store = ContentStore.from_settings(settings)
    service = RelatedService(store, RelatedScorer(), default_limit=settings.related_limit)
    items = service.related_for_url(args.url, args.limit)
    if items is None:
        logger.error("No document at %s", args.url)
        return 1
    _emit({"url": args.url, "count": len(items), "items": [item.to_payload() for item in items]})
    return 0


def cmd_audit(args: argparse.Namespace, settings: Settings) -> int:
    reports = audit_programs(settings.content_dir())
    for report in reports:
        if not report.ok:
            logger.warning(format_report(report))
        elif args.all:
            logger.info(format_report(report))
    bad = [report.to_dict() for report in reports if not report.ok]
    _emit({"checked": len(reports), "bad": len(bad), "files": bad})
    return determine_exit_code(reports)


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from content_hub.app import create_app

    init_tracing(service_name="content-hub")
    app = create_app(settings)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
    return 0


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="content-hub", description="Content tree loader, search index and API")
    parser.add_argument("--content-root", type=Path, help="Content root directory (default: CONTENT_ROOT)")
    parser.add_argument("--index", type=Path, help="Search index artifact path (default: INDEX_PATH)")
    parser.add_argument("--log-level", help="Override the log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build-index", help="Build and write the search index artifact")
    build.add_argument("--output", type=Path, help="Write the artifact here instead of INDEX_PATH")
    build.set_defaults(handler=cmd_build_index)

    search = subparsers.add_parser("search", help="Query the search index artifact")
    search.add_argument("query")
    search.add_argument("--types", help="Comma-separated entry types, e.g. program,article")
    search.add_argument("--limit", type=int)
    search.set_defaults(handler=cmd_search)

    related = subparsers.add_parser("related", help="Related items for a document URL")
    related.add_argument("url")
    related.add_argument("--limit", type=int)
    related.set_defaults(handler=cmd_related)

    audit = subparsers.add_parser("audit", help="Report program files with placement or metadata problems")
    audit.add_argument("--all", action="store_true", help="Log every audited file, not only bad ones")
    audit.set_defaults(handler=cmd_audit)

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(handler=cmd_serve)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args)
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 2

    # Command output owns stdout; logs go to stderr except when serving.
    stream = sys.stdout if args.command == "serve" else sys.stderr
    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json, stream=stream)

    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
