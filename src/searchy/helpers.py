"""
Plain string-in, string-out helpers for tool-calling hosts.

Each helper runs one searchy command in-process and returns what it would
have printed. Stderr output is appended after an "Error:" marker and
exceptions come back as "Error: <message>", so callers never see a raise.
These use asyncio.run and must not be called from inside a running event loop.
"""
import io
from contextlib import redirect_stderr

from searchy.cli import run


def _execute(argv) -> str:
    output = io.StringIO()
    errors = io.StringIO()
    try:
        with redirect_stderr(errors):
            run(argv, out=output)
    except SystemExit:
        # argparse has already written its usage and message to stderr
        pass
    except Exception as e:
        return f"Error: {e}"

    error_text = errors.getvalue()
    if error_text.strip():
        return f"{output.getvalue()}\nError: {error_text}"
    return output.getvalue()


def search_bing(query: str) -> str:
    """Performs a search using Bing and returns the URLs of the search results."""
    return _execute(["search", "--bing", "--", query])


def search_google(query: str) -> str:
    """Performs a search using Google and returns the URLs of the search results."""
    return _execute(["search", "--google", "--", query])


def download_and_strip_html(url: str) -> str:
    """Downloads content from a specific URL and returns the text content after stripping HTML tags."""
    return _execute(["get", "--strip", "--", url])
