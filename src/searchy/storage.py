"""Persist fetched content under collision-free, URL-derived file names."""
import logging
import secrets
import time
from pathlib import Path
from typing import Union
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

# leaves room for the collision suffix under the usual 255-byte name limit
MAX_NAME_BYTES = 200


def base_name_for(url: str) -> str:
    """
    Flatten host, path and query of a URL into a dash-separated file name.

    Every non-alphanumeric character is a separator, so
    ``https://example.com/docs/a.html?x=1`` becomes ``example-com-docs-a-html-x-1``.
    Names are cut to MAX_NAME_BYTES of UTF-8.
    """
    parts = urlsplit(url)
    raw = (parts.hostname or "") + parts.path
    if parts.query:
        raw += "?" + parts.query

    segments = []
    current = []
    for ch in raw:
        if ch.isalnum():
            current.append(ch)
        elif current:
            segments.append("".join(current))
            current = []
    if current:
        segments.append("".join(current))

    name = "-".join(segments)
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        name = name.encode("utf-8")[:MAX_NAME_BYTES].decode("utf-8", "ignore").rstrip("-")
    return name


def _disambiguated(path: Path) -> Path:
    token = secrets.token_hex(4)  # 8 characters
    return path.with_name(f"{path.name}-{time.monotonic_ns()}-{token}")


def allocate_path(url: str, folder: Union[str, Path]) -> Path:
    """
    Propose a path in ``folder`` for the content of ``url``.

    The folder is created when missing. Nothing else is written; calling this
    twice on an unchanged folder yields the same path whenever the plain name
    is still free.
    """
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)

    path = folder / (base_name_for(url) or "page")
    while path.exists():
        path = _disambiguated(folder / (base_name_for(url) or "page"))
    return path


def save_content(url: str, content: str, folder: Union[str, Path]) -> Path:
    """Write ``content`` to a freshly allocated path and return that path."""
    path = allocate_path(url, folder)
    # "x" refuses to clobber anything that appeared since the check
    with open(path, "x", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info(f"Saved {url} -> {path}")
    return path
