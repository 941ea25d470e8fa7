"""
Top-level search and get flows.

One browser session is opened per command and reused for every URL in it,
so startup cost is paid once and cookies carry across requests. Output goes
to a text stream: bare URLs for a search listing, separator-wrapped blocks
when content for several URLs is printed.
"""
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from searchy.browser import open_session
from searchy.config import Settings
from searchy.engines import DEFAULT_ENGINE, ENGINES, get_extractor, is_http_url
from searchy.errors import InputError, InvalidURLError
from searchy.fetcher import ContentFetcher, FetchOutcome

logger = logging.getLogger(__name__)

SEPARATOR = "---separator---"
NO_RESULTS = "No results found."


def validate_urls(urls: Iterable[str]) -> List[str]:
    """Return the URLs as a list, or raise InvalidURLError naming every bad one."""
    urls = list(urls)
    if not urls:
        raise InputError("No URLs provided.")
    bad = [u for u in urls if not is_http_url(u)]
    if bad:
        raise InvalidURLError(bad)
    return urls


@dataclass(frozen=True)
class SearchRequest:
    query: str
    engine: str = DEFAULT_ENGINE
    max_results: int = 10
    fetch_content: bool = False
    strip_html: bool = True
    save_folder: Optional[Path] = None
    markdown: bool = False

    def __post_init__(self):
        object.__setattr__(self, "engine", (self.engine or "").lower())
        if not self.query or not self.query.strip():
            raise InputError("No search terms provided.")
        if self.engine not in ENGINES:
            raise InputError(f"Unknown search engine: {self.engine}")
        if self.max_results < 1:
            raise InputError(f"Invalid value for --max: {self.max_results}")

    @classmethod
    def from_terms(cls, terms: Sequence[str], **kwargs) -> "SearchRequest":
        return cls(query=" ".join(terms).strip(), **kwargs)


@dataclass(frozen=True)
class GetRequest:
    urls: tuple
    strip_html: bool = False
    save_folder: Optional[Path] = None
    markdown: bool = False

    def __post_init__(self):
        object.__setattr__(self, "urls", tuple(validate_urls(self.urls)))


class Retriever:
    """Runs search and get commands against a single browser session."""

    def __init__(self, settings: Optional[Settings] = None, session_factory=open_session,
                 out=None, sleep=asyncio.sleep):
        self.settings = settings or Settings()
        self.session_factory = session_factory
        self.out = out
        self.sleep = sleep

    def _emit(self, line: str) -> None:
        stream = self.out or sys.stdout
        print(line, file=stream)
        stream.flush()

    def _fetcher(self, session, strip_html, markdown, save_folder) -> ContentFetcher:
        return ContentFetcher(
            session,
            settings=self.settings,
            strip_html=strip_html,
            markdown=markdown,
            save_folder=save_folder,
            sleep=self.sleep,
        )

    async def search(self, request: SearchRequest) -> List[str]:
        """Print result URLs, or their content when fetch_content is set."""
        extractor = get_extractor(request.engine)
        async with self.session_factory(self.settings) as session:
            search_url = extractor.search_url(request.query)
            logger.info(f"Searching {extractor.name} for '{request.query}'")
            await session.navigate(search_url)
            urls = await extractor.extract(session, request.max_results)

            if not urls:
                self._emit(NO_RESULTS)
                return urls

            if not request.fetch_content:
                for url in urls:
                    self._emit(url)
                return urls

            fetcher = self._fetcher(session, request.strip_html, request.markdown, request.save_folder)
            await self.emit_contents(fetcher, urls)
            return urls

    async def get(self, request: GetRequest) -> List[FetchOutcome]:
        """Print the content of every requested URL."""
        async with self.session_factory(self.settings) as session:
            fetcher = self._fetcher(session, request.strip_html, request.markdown, request.save_folder)
            return await self.emit_contents(fetcher, list(request.urls))

    async def emit_contents(self, fetcher: ContentFetcher, urls: List[str]) -> List[FetchOutcome]:
        """Fetch URLs in order; a lone URL prints bare, several are separator-wrapped."""
        if len(urls) == 1:
            outcome = await fetcher.fetch(urls[0])
            self._emit(outcome.text)
            return [outcome]

        outcomes = []
        for url in urls:
            self._emit(SEPARATOR)
            self._emit(f"url: {url}")
            self._emit(SEPARATOR)
            outcome = await fetcher.fetch(url)
            self._emit(outcome.text)
            outcomes.append(outcome)
        self._emit(SEPARATOR)

        failed = sum(1 for o in outcomes if not o.ok)
        if failed:
            logger.warning(f"{failed} of {len(outcomes)} URLs could not be fetched")
        return outcomes


async def run_with_timeout(coro, timeout: Optional[float]):
    """Await ``coro``, cancelling it after ``timeout`` seconds when one is set."""
    if timeout is None:
        return await coro
    return await asyncio.wait_for(coro, timeout)
