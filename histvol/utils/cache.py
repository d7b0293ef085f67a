"""
Caching utilities for downloaded datasets.

Two layers are provided:
- Disk helpers used by the loader to keep raw OHLC downloads on disk
- DatasetCache, a bounded in-memory cache of parsed/fetched price series
  keyed by a content hash of the request
"""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

logger = logging.getLogger(__name__)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_cache_path(cache_dir: str, filename: str) -> Path:
    """
    Get full path for a cache file, ensuring directory exists.

    Args:
        cache_dir: Cache directory path
        filename: Cache filename

    Returns:
        Full path to cache file
    """
    cache_path = ensure_directory(cache_dir)
    return cache_path / filename


@dataclass
class CacheEntry:
    """A cached value with its usage bookkeeping."""
    value: Any
    hits: int = 0
    last_used: float = field(default_factory=time.monotonic)


class DatasetCache:
    """
    Bounded in-memory cache for datasets.

    Keys are SHA-256 digests of (ticker set, start date, end date), so the
    order in which tickers are requested does not matter. Reading an entry
    promotes it; inserting beyond ``capacity`` evicts the least recently
    used entries.
    """

    def __init__(self, capacity: int = 8):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"Cache capacity must be a positive integer, got {capacity!r}")
        self.capacity = capacity
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    @staticmethod
    def make_key(tickers: Union[str, Iterable[str]], start_date: Any, end_date: Any) -> str:
        """
        Build the content hash for a request.

        Args:
            tickers: A ticker symbol or an iterable of them
            start_date: Start of the requested range
            end_date: End of the requested range

        Returns:
            Hex digest identifying the request
        """
        if isinstance(tickers, str):
            tickers = [tickers]
        ticker_set = sorted({t.strip().upper() for t in tickers})
        payload = '|'.join([','.join(ticker_set), str(start_date), str(end_date)])
        return hashlib.sha256(payload.encode('utf-8')).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.hits += 1
        entry.last_used = time.monotonic()
        self._entries.move_to_end(key)
        return entry.value

    def put(self, key: str, value: Any) -> None:
        if key in self._entries:
            entry = self._entries[key]
            entry.value = value
            entry.last_used = time.monotonic()
            self._entries.move_to_end(key)
        else:
            self._entries[key] = CacheEntry(value=value)

        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted dataset cache entry {evicted[:12]}")

    def hits(self, key: str) -> int:
        """Number of times ``key`` has been read since it was inserted."""
        entry = self._entries.get(key)
        return entry.hits if entry is not None else 0

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
