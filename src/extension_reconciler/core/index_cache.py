"""Fetch repository ``index.yaml`` documents and cache them per repository URL."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

import httpx
import yaml

from extension_reconciler.config.settings import settings
from extension_reconciler.core.errors import IndexFetchError, IndexParseError
from extension_reconciler.models.index import IndexCacheEntry, IndexDocument
from extension_reconciler.utils.deadline import remaining

logger = logging.getLogger(__name__)

# Prefer the C-accelerated YAML loader when available (~10x faster).
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)

# Called as fetcher(url, timeout=seconds).
Fetcher = Callable[..., IndexDocument]


def index_url(repo_url: str) -> str:
    return f"{repo_url.rstrip('/')}/index.yaml"


def fetch_index(
    url: str,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> IndexDocument:
    """GET and parse one index document. No retries; any non-2xx is fatal."""
    owns_client = client is None
    http = client if client is not None else httpx.Client(follow_redirects=True)
    try:
        response = http.get(url, timeout=timeout or settings.index_fetch_timeout)
    except httpx.HTTPError as e:
        raise IndexFetchError(url, str(e)) from e
    finally:
        if owns_client:
            http.close()

    if not response.is_success:
        raise IndexFetchError(url, f"HTTP {response.status_code} {response.reason_phrase}")

    try:
        data = yaml.load(response.text, Loader=_YamlLoader)
    except yaml.YAMLError as e:
        raise IndexParseError(url, f"invalid YAML: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise IndexParseError(url, "index document is not a mapping")
    return IndexDocument.from_dict(data)


class IndexCache:
    """Process-wide map of repository URL to the first index fetched for it.

    Entries never expire. The lock guards map access only; the fetch itself
    runs outside it, so two concurrent misses for one URL may both fetch.
    """

    def __init__(self, fetcher: Fetcher | None = None):
        self._fetcher = fetcher or fetch_index
        self._lock = threading.Lock()
        self._items: dict[str, IndexCacheEntry] = {}

    def get(self, repo_url: str) -> IndexCacheEntry | None:
        with self._lock:
            return self._items.get(repo_url)

    def set(self, repo_url: str, entry: IndexCacheEntry) -> None:
        with self._lock:
            self._items[repo_url] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get_or_fetch(self, repo_url: str, deadline: float | None = None) -> IndexDocument:
        entry = self.get(repo_url)
        if entry is not None:
            logger.debug("Index cache hit for %s (fetched %s)", repo_url, entry.fetched_at.isoformat())
            return entry.index

        logger.debug("Index cache miss for %s", repo_url)
        url = index_url(repo_url)
        timeout = remaining(deadline, settings.index_fetch_timeout, f"fetch {url}")
        index = self._fetcher(url, timeout=timeout)
        self.set(repo_url, IndexCacheEntry(index=index, fetched_at=datetime.now(timezone.utc)))
        return index
