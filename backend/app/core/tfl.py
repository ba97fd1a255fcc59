"""Shared TfL client and line sequence cache (process-lifetime singletons)."""

import threading

from app.services.line_sequence_cache import LineSequenceCache
from app.services.tfl_client import TflClient

# Module-level globals for lazy initialization (fork-safety)
_tfl_client: TflClient | None = None
_line_sequence_cache: LineSequenceCache | None = None

# Thread locks for thread-safe singleton initialization
_tfl_client_lock = threading.Lock()
_line_sequence_cache_lock = threading.Lock()


def get_tfl_client() -> TflClient:
    """
    Get or create the shared TfL client (lazy initialization).

    Lazy creation gives each forked uvicorn worker its own pydantic-tfl-api
    clients instead of sharing the parent's HTTP sessions.

    Returns:
        TflClient: Shared client wrapping the Line, StopPoint and Journey clients
    """
    global _tfl_client  # noqa: PLW0603
    if _tfl_client is None:
        with _tfl_client_lock:
            if _tfl_client is None:  # Double-checked locking
                _tfl_client = TflClient()
    return _tfl_client


def get_line_sequence_cache() -> LineSequenceCache:
    """
    Get or create the process-wide line sequence cache.

    Returns:
        LineSequenceCache: Cache shared by every request in this process
    """
    global _line_sequence_cache  # noqa: PLW0603
    if _line_sequence_cache is None:
        with _line_sequence_cache_lock:
            if _line_sequence_cache is None:  # Double-checked locking
                _line_sequence_cache = LineSequenceCache(get_tfl_client())
    return _line_sequence_cache


def reset_tfl_client() -> None:
    """Drop the shared TfL client and the cache that depends on it (used on shutdown)."""
    global _tfl_client, _line_sequence_cache  # noqa: PLW0603
    _tfl_client = None
    _line_sequence_cache = None
