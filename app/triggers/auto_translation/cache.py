# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/15 22:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译结果缓存与消息去重
"""
import hashlib
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from loguru import logger

from triggers.auto_translation.language_catalog import normalize

Clock = Callable[[], float]


class TranslationCache:
    """In-memory (text, target language) -> translation cache.

    Entries expire lazily on read once they are older than ``ttl_seconds``.
    When a write pushes the size past ``max_entries`` the whole map is dropped.
    """

    def __init__(self, ttl_seconds: float = 900, max_entries: int = 1000, clock: Clock = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(text: str, lang: str) -> str:
        content = f"{normalize(lang)}\x00{text}"
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def get(self, text: str, lang: str) -> Optional[str]:
        key = self.make_key(text, lang)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            translation, inserted_at = entry
            if self._clock() - inserted_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return None

            self.hits += 1
            return translation

    def put(self, text: str, lang: str, translation: str) -> None:
        key = self.make_key(text, lang)
        with self._lock:
            self._entries[key] = (translation, self._clock())
            if len(self._entries) > self.max_entries:
                logger.info(f"Translation cache exceeded {self.max_entries} entries, clearing")
                self._entries.clear()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "size": len(self),
            "max_entries": self.max_entries,
            "hit_ratio": self.hits / total if total > 0 else 0,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class IdempotencyCache:
    """Remembers message keys for a short window so redelivered events are dropped."""

    def __init__(self, ttl_seconds: float = 60, clock: Clock = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, seen_at in self._seen.items() if now - seen_at >= self.ttl_seconds]
        for key in expired:
            del self._seen[key]

    def check_and_mark(self, key: str) -> bool:
        """Returns True the first time ``key`` is seen inside the window."""
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if key in self._seen:
                return False
            self._seen[key] = now
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
