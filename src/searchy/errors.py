"""Exception types raised by searchy."""


class SearchyError(Exception):
    """Base class for all searchy errors."""


class ConfigError(SearchyError):
    """Bad value in the environment or settings."""


class InputError(SearchyError):
    """Bad command input, reported before any browser activity."""


class InvalidURLError(InputError):
    """One or more targets are not HTTP(S) URLs."""

    def __init__(self, urls):
        self.urls = list(urls)
        if len(self.urls) == 1:
            message = f"Invalid URL: {self.urls[0]}"
        else:
            message = "Invalid URLs:\n" + "\n".join(f"  {u}" for u in self.urls)
        super().__init__(message)


class RateLimitExceeded(SearchyError):
    """The upstream rate limit did not clear within the allowed waits."""

    def __init__(self, url, waits):
        self.url = url
        self.waits = waits
        super().__init__(f"Rate limit still exceeded for {url} after {waits} waits")
