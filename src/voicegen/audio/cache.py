"""
In-Memory Resource Cache.

Maps audio codes to the upstream URLs they stand for. Features:
    - Insert-or-overwrite puts, lookups that raise NotFoundError
    - Thread-safe operations behind a single lock
    - Statistics tracking (hits, misses, puts)

Entries live for the lifetime of the process. The eviction policy is an
explicit configuration value (``cache.eviction``) and "none" is the only
policy implemented; nothing is ever removed.

Example:
    >>> from voicegen.audio.cache import ResourceCache
    >>> cache = ResourceCache()
    >>> cache.put("a1b2c3d4e5", "https://tmpfiles.org/dl/1/voicegen.mp3")
    >>> cache.get("a1b2c3d4e5")
    'https://tmpfiles.org/dl/1/voicegen.mp3'
"""
from __future__ import annotations

import threading
from typing import Dict

from voicegen.core.config import Defaults, EVICTION_POLICIES
from voicegen.core.logging import debug, get_logger, verbose
from voicegen.core.errors import NotFoundError

_LOG = get_logger("voicegen.cache")


class ResourceCache:
    """
    Thread-safe code -> upstream URL map without eviction.

    The generation pipeline is the only writer and the audio proxy the only
    reader. Each operation holds the lock for a single dict access, so a
    get() concurrent with an unrelated put() always sees a consistent map.

    Attributes:
        eviction: Name of the eviction policy in effect ("none").
    """

    def __init__(self, eviction: str = Defaults.CACHE_EVICTION):
        if eviction not in EVICTION_POLICIES:
            raise ValueError(f"unsupported eviction policy: {eviction!r}")
        self.eviction = eviction

        self._d: Dict[str, str] = {}
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._puts = 0

    def put(self, code: str, url: str) -> None:
        """
        Store ``url`` under ``code``, replacing any previous value.

        Because codes are derived from URLs, an overwrite always writes the
        value that was already there.
        """
        with self._lock:
            replaced = code in self._d
            self._d[code] = url
            self._puts += 1
            size = len(self._d)

        verbose(_LOG, "cache_put", code=code, replaced=replaced, size=size)

    def get(self, code: str) -> str:
        """
        Resolve a code to its upstream URL.

        Raises:
            NotFoundError: If the code was never stored.
        """
        with self._lock:
            url = self._d.get(code)
            if url is None:
                self._misses += 1
            else:
                self._hits += 1

        if url is None:
            debug(_LOG, "cache_miss", code=code)
            raise NotFoundError(details={"code": code})
        return url

    def stats(self) -> Dict[str, object]:
        with self._lock:
            return {
                "size": len(self._d),
                "hits": self._hits,
                "misses": self._misses,
                "puts": self._puts,
                "eviction": self.eviction,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._d)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._d
