"""Command line entry point: build an index snapshot from a corpus and query it."""

# ruff: noqa: T201  # CLI intentionally prints results

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson

from site_search.config import SearchSettings, get_settings
from site_search.observability.logging import configure_logging
from site_search.observability.metrics import get_metrics
from site_search.search.analyzers import StandardAnalyzer
from site_search.search.engine import ALL_VERSIONS, SearchEngine
from site_search.search.indexer import build_search_index, load_posts
from site_search.search.models import SearchResult
from site_search.search.snapshot import dump_index, load_index


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="site-search", description=__doc__)
    parser.add_argument("--log-level", default=None, help="Override SITE_SEARCH_LOG_LEVEL")
    parser.add_argument("--plain-logs", action="store_true", help="Human-readable logs instead of JSON")
    parser.add_argument("--metrics", action="store_true", help="Write Prometheus metrics to stderr when done")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Index a JSON/JSON-lines corpus of posts")
    build.add_argument("corpus", type=Path)
    build.add_argument("-o", "--output", type=Path, required=True, help="Snapshot path (.gz to compress)")
    build.add_argument("--no-trigrams", action="store_true", help="Skip the fuzzy-search trigram index")

    query = subparsers.add_parser("query", help="Run a query against an index snapshot")
    query.add_argument("index", type=Path)
    query.add_argument("query")
    query.add_argument("--version", dest="version_filter", default=ALL_VERSIONS, help="Version label or 'all'")
    query.add_argument("--json", action="store_true", help="Emit results as JSON")
    return parser


def _analyzer_for(settings: SearchSettings) -> StandardAnalyzer:
    return StandardAnalyzer(use_stopwords=settings.use_stopwords, use_stemming=settings.use_stemming)


def run_build(args: argparse.Namespace, settings: SearchSettings) -> int:
    posts = load_posts(args.corpus)
    index = build_search_index(posts, _analyzer_for(settings), with_trigrams=not args.no_trigrams)
    size = dump_index(index, args.output)
    print(f"Indexed {index.total_docs} posts ({index.vocabulary_size} terms) -> {args.output} [{size} bytes]")
    return 0


def format_result(rank: int, result: SearchResult) -> str:
    lines = [f"{rank:>2}. {result.title}  ({result.score:.3f})", f"    {result.link}"]
    if result.snippet:
        lines.append(f"    {result.snippet}")
    return "\n".join(lines)


def run_query(args: argparse.Namespace, settings: SearchSettings) -> int:
    index = load_index(args.index)
    engine = SearchEngine(settings, _analyzer_for(settings))
    results = engine.search(index, args.query, args.version_filter)
    if args.json:
        print(orjson.dumps([result.to_dict() for result in results], option=orjson.OPT_INDENT_2).decode("utf-8"))
        return 0
    if not results:
        print("No results.")
        return 0
    for rank, result in enumerate(results, start=1):
        print(format_result(rank, result))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json and not args.plain_logs)

    handlers = {"build": run_build, "query": run_query}
    try:
        status = handlers[args.command](args, settings)
    except (ValueError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        status = 1
    if args.metrics:
        sys.stderr.write(get_metrics().decode("utf-8"))
    return status
