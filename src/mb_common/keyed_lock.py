"""Per-key asyncio locks for in-process single-writer sections.

Striped: a fixed pool of locks indexed by key hash, so memory stays bounded no
matter how many transaction ids pass through. Two keys may share a stripe
(harmless extra serialization). Cross-process safety comes from the database
(SELECT ... FOR UPDATE + compare-and-swap status updates); this only avoids
piling concurrent requests onto the same row inside one worker.
"""

import asyncio
import zlib


class KeyedLock:
    def __init__(self, stripes: int = 256) -> None:
        if stripes < 1:
            raise ValueError("stripes must be >= 1")
        self._locks = [asyncio.Lock() for _ in range(stripes)]

    def for_key(self, key: str) -> asyncio.Lock:
        return self._locks[zlib.crc32(key.encode("utf-8")) % len(self._locks)]
