"""Result cache interface and an in-memory implementation."""

from __future__ import annotations

import asyncio
import hashlib
import json
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Protocol

from .structures import PageText, PageTranslation


@dataclass(frozen=True)
class CacheKey:
    """Composite cache key: provider, language pair and content identity."""

    provider: str
    source_language: str
    target_language: str
    content_id: str

    def as_string(self) -> str:
        return ":".join(
            (self.provider, self.source_language, self.target_language, self.content_id)
        )


def content_identity(page: PageText) -> str:
    """Stable digest of the page text, including its group boundaries."""

    serialized = json.dumps([list(group) for group in page], ensure_ascii=False)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:32]


class ResultCache(Protocol):
    async def get(self, key: CacheKey) -> Optional[PageTranslation]:
        ...

    async def put(self, key: CacheKey, translation: PageTranslation) -> None:
        ...


class InMemoryResultCache:
    """Bounded LRU cache living for the lifetime of the process."""

    def __init__(self, max_entries: int = 256) -> None:
        self.max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, PageTranslation] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: CacheKey) -> Optional[PageTranslation]:
        async with self._lock:
            cached = self._entries.get(key.as_string())
            if cached is not None:
                self._entries.move_to_end(key.as_string())
            return cached

    async def put(self, key: CacheKey, translation: PageTranslation) -> None:
        async with self._lock:
            self._entries[key.as_string()] = translation
            self._entries.move_to_end(key.as_string())
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
