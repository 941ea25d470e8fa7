"""Fetch page content through a browser session, one URL at a time."""
import asyncio
import logging
import re
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from searchy.browser import BrowserSession, is_navigation_in_progress
from searchy.config import Settings
from searchy.errors import RateLimitExceeded
from searchy.normalize import normalize
from searchy.storage import save_content

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKER = "Rate limit is exceeded. Try again in"
RATE_LIMIT_PATTERN = re.compile(r"Rate limit is exceeded\. Try again in (\d+) seconds\.")


def rate_limit_delay(content: str) -> Optional[int]:
    """
    Seconds to wait when ``content`` is a rate-limit notice, else None.

    Raises ValueError for a notice whose delay cannot be read.
    """
    if RATE_LIMIT_MARKER not in content:
        return None
    match = RATE_LIMIT_PATTERN.search(content)
    if match is None:
        raise ValueError("Rate limit notice without a readable delay")
    return int(match.group(1))


@dataclass
class FetchOutcome:
    """
    Result of fetching one URL. Exactly one of content or error is set.

    A failed save keeps the content; the reason goes to save_error.
    """
    url: str
    raw_content: Optional[str] = None
    normalized_content: Optional[str] = None
    error: Optional[str] = None
    saved_path: Optional[Path] = None
    save_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """What gets printed for this URL."""
        if self.error is not None:
            return self.error
        if self.normalized_content is not None:
            return self.normalized_content
        return self.raw_content or ""


class ContentFetcher:
    """
    Retrieves pages through one session with retry and rate-limit recovery.

    Failures never escape fetch(); they come back as the outcome's error text
    so a batch of URLs keeps going.
    """

    def __init__(
        self,
        session: BrowserSession,
        settings: Optional[Settings] = None,
        strip_html: bool = False,
        markdown: bool = False,
        save_folder: Optional[Union[str, Path]] = None,
        sleep=asyncio.sleep,
    ):
        self.session = session
        self.settings = settings or Settings()
        self.strip_html = strip_html
        self.markdown = markdown
        self.save_folder = save_folder
        self.sleep = sleep

    async def fetch(self, url: str) -> FetchOutcome:
        try:
            raw = await self._fetch_past_rate_limit(url)
            outcome = FetchOutcome(url=url, raw_content=raw)
            if self.strip_html or self.markdown:
                outcome.normalized_content = normalize(raw, markdown=self.markdown)
            if self.save_folder is not None:
                self._save(outcome)
            return outcome
        except Exception as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            return FetchOutcome(
                url=url,
                error=f"Error fetching content from {url}: {e}\n{traceback.format_exc()}",
            )

    def _save(self, outcome: FetchOutcome) -> None:
        try:
            outcome.saved_path = save_content(outcome.url, outcome.text, self.save_folder)
        except OSError as e:
            logger.warning(f"Could not save {outcome.url}: {e}")
            outcome.save_error = f"Error saving content from {outcome.url}: {e}"

    async def _fetch_past_rate_limit(self, url: str) -> str:
        waits = 0
        limit = self.settings.max_rate_limit_waits
        while True:
            logger.info(f"Navigating to {url}")
            await self.session.navigate(url)
            content = await self._read_content()

            seconds = rate_limit_delay(content)
            if seconds is None:
                return content
            if limit is not None and waits >= limit:
                raise RateLimitExceeded(url, waits)

            waits += 1
            logger.info(f"Rate limited on {url}, waiting {seconds}s before reloading (wait {waits})")
            await self.sleep(seconds)

    async def _read_content(self) -> str:
        attempts_left = self.settings.content_retries + 1
        while True:
            try:
                return await self.session.content()
            except Exception as e:
                attempts_left -= 1
                if attempts_left == 0 or not is_navigation_in_progress(e):
                    raise
                logger.info(f"Page still navigating, retrying content read ({attempts_left} left)")
                await self.sleep(self.settings.retry_delay)
