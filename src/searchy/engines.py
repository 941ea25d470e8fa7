"""
Search engine result extraction.

Each engine is a ResultExtractor that knows its query URL, which anchors on a
results page count as results, and how to reach the next page. New engines
only need a subclass and an entry in ENGINES.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from urllib.parse import quote

from searchy.browser import BrowserSession

logger = logging.getLogger(__name__)


def is_http_url(href: Optional[str]) -> bool:
    return bool(href) and href.lower().startswith(("http://", "https://"))


class ResultExtractor(ABC):
    """Scrapes paginated result pages of one search engine."""

    name = ""
    base_url = ""
    result_selector = ""
    next_selector = ""

    def search_url(self, query: str) -> str:
        return f"{self.base_url}?q={quote(query, safe='')}"

    @abstractmethod
    def accepts(self, href: Optional[str]) -> bool:
        """Whether an anchor's href is an organic result for this engine."""

    async def extract(self, session: BrowserSession, max_results: int) -> List[str]:
        """
        Collect up to ``max_results`` unique result URLs, following next-page
        controls from the page the session is currently on.

        Browser errors end the scan early; whatever was gathered is returned.
        """
        urls: List[str] = []
        seen = set()
        page_number = 1

        try:
            while len(urls) < max_results:
                elements = await session.query_all(self.result_selector)
                for element in elements:
                    href = await session.get_attribute(element, "href")
                    if self.accepts(href) and href not in seen:
                        seen.add(href)
                        urls.append(href)
                    if len(urls) >= max_results:
                        break

                logger.debug(f"{self.name}: page {page_number} scanned, {len(urls)} results so far")
                if len(urls) >= max_results:
                    break

                next_controls = await session.query_all(self.next_selector)
                if not next_controls:
                    break

                await session.click(next_controls[0])
                await session.wait_for_network_idle()
                page_number += 1
        except Exception as e:
            logger.warning(f"{self.name}: result extraction stopped on page {page_number}: {e}")

        logger.info(f"{self.name}: {len(urls)} results from {page_number} page(s)")
        return urls[:max_results]


class GoogleExtractor(ResultExtractor):
    name = "google"
    base_url = "https://www.google.com/search"
    result_selector = "div#search a[href]"
    next_selector = "a#pnnext"

    def accepts(self, href):
        # links back into google.* are service pages, not results
        return is_http_url(href) and "google" not in href


class BingExtractor(ResultExtractor):
    name = "bing"
    base_url = "https://www.bing.com/search"
    result_selector = "li.b_algo a[href]"
    next_selector = "a.sb_pagN"

    def accepts(self, href):
        return is_http_url(href)


ENGINES: Dict[str, ResultExtractor] = {
    GoogleExtractor.name: GoogleExtractor(),
    BingExtractor.name: BingExtractor(),
}

DEFAULT_ENGINE = GoogleExtractor.name


def get_extractor(engine: str) -> ResultExtractor:
    try:
        return ENGINES[engine.lower()]
    except KeyError:
        raise ValueError(f"Unknown search engine: {engine}. Available: {', '.join(sorted(ENGINES))}") from None
