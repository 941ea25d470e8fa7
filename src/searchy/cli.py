"""
Searchy - a simple web search and content retrieval tool using Playwright.

Usage:
    searchy search TERMS... [--google | --bing] [--get] [--strip] [--max N] [--save DIR]
    searchy get URL... [--strip] [--save DIR]

Targets for `get` may be URLs, `-` to read URLs from stdin, or `@FILE` to read
them from a file (one per line).
"""
import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from searchy import __version__
from searchy.browser import open_session
from searchy.config import Settings
from searchy.engines import BingExtractor, DEFAULT_ENGINE, GoogleExtractor
from searchy.errors import SearchyError
from searchy.log import LOGGER_NAME, level_for_verbosity, setup_logger
from searchy.orchestrator import GetRequest, Retriever, SearchRequest, run_with_timeout

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid value for --max: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"--max must be a positive integer, got {number}")
    return number


def non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--strip", action="store_true", help="Strip HTML tags from downloaded content")
    common.add_argument("--markdown", action="store_true", help="Render downloaded content as Markdown")
    common.add_argument("--save", metavar="DIR", type=Path, help="Also save each downloaded page under DIR")
    common.add_argument("--timeout", metavar="SECONDS", type=non_negative_float,
                        help="Abort the whole command after SECONDS")
    common.add_argument("--max-rate-limit-waits", metavar="N", type=non_negative_int,
                        help="Give up on a URL after waiting out its rate limit N times (default: never)")
    common.add_argument("--headful", action="store_true", help="Show the browser window")
    common.add_argument("-v", "--verbose", action="count", default=0, help="Log progress to stderr (-vv for debug)")

    parser = argparse.ArgumentParser(
        prog="searchy",
        description="Searchy - A simple web search and content retrieval tool using Playwright",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    search = subparsers.add_parser("search", parents=[common], help="Searches for content w/ Bing or Google")
    engine = search.add_mutually_exclusive_group()
    engine.add_argument("--google", dest="engine", action="store_const", const=GoogleExtractor.name,
                        help="Use Google search engine (default)")
    engine.add_argument("--bing", dest="engine", action="store_const", const=BingExtractor.name,
                        help="Use Bing search engine")
    search.add_argument("--get", dest="fetch", action="store_true",
                        help="Download content from search results (default: false)")
    search.add_argument("--max", dest="max_results", type=positive_int, default=10,
                        help="Maximum number of search results (default: 10)")
    search.add_argument("terms", nargs="*", help="Search terms")
    search.set_defaults(engine=DEFAULT_ENGINE)

    get = subparsers.add_parser("get", parents=[common], help="Downloads content from URL(s)")
    get.add_argument("targets", nargs="*", metavar="URL", help="URL, '-' for stdin, or @FILE")

    return parser


def _clean_lines(lines: Iterable[str]) -> List[str]:
    return [line.strip() for line in lines if line.strip()]


def expand_targets(targets: Iterable[str], stdin=None) -> List[str]:
    """Resolve `-` and `@FILE` entries into the URLs they contain."""
    urls = []
    for target in targets:
        if target == "-":
            urls.extend(_clean_lines(stdin if stdin is not None else sys.stdin))
        elif target.startswith("@") and os.path.isfile(target[1:]):
            with open(target[1:], encoding="utf-8") as f:
                urls.extend(_clean_lines(f))
        else:
            urls.append(target)
    return urls


def load_settings(args) -> Settings:
    settings = Settings.from_env()
    return settings.with_overrides(
        headless=False if args.headful else None,
        run_timeout=args.timeout,
        max_rate_limit_waits=args.max_rate_limit_waits,
        log_level=level_for_verbosity(args.verbose) if args.verbose else None,
    )


def run(argv: Optional[List[str]] = None, stdin=None, session_factory=open_session, out=None) -> int:
    """Parse arguments, run the command and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args)
        setup_logger(LOGGER_NAME, settings.log_level)

        if args.command == "search":
            request = SearchRequest.from_terms(
                args.terms,
                engine=args.engine,
                max_results=args.max_results,
                fetch_content=args.fetch,
                strip_html=True,
                save_folder=args.save,
                markdown=args.markdown,
            )
        else:
            request = GetRequest(
                urls=tuple(expand_targets(args.targets, stdin)),
                strip_html=args.strip,
                save_folder=args.save,
                markdown=args.markdown,
            )
    except SearchyError as e:
        print(e, file=out or sys.stdout)
        return 1

    retriever = Retriever(settings, session_factory=session_factory, out=out)
    work = retriever.search(request) if args.command == "search" else retriever.get(request)
    try:
        asyncio.run(run_with_timeout(work, settings.run_timeout))
    except asyncio.TimeoutError:
        logger.error(f"Gave up after {settings.run_timeout}s")
        print(f"Error: timed out after {settings.run_timeout} seconds", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {args.command} failed: {e}", file=sys.stderr)
        return 1
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
