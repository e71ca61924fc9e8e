"""Memoized rendering of speculation-rules markup.

Rendering is cheap, but it runs on every page view. ``RuleCache`` keeps the
rendered block per settings record and page category, so pages that share
a category reuse one string. Settings are frozen and hashable, which makes
any change to them a new key; ``invalidate`` exists for callers that want
to drop everything when content or settings are saved.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass

from specrules.common.settings import SpeculationSettings
from specrules.generator import PageContext
from specrules.render import render_rules

_CacheKey = tuple[SpeculationSettings, str | None, str | None]


@dataclass
class CacheStats:
    """Counters for a ``RuleCache``."""

    hits: int = 0
    misses: int = 0
    size: int = 0


class RuleCache:
    """Thread-safe LRU cache of rendered markup.

    Example:
        cache = RuleCache()
        markup = cache.render(settings, PageContext(category="product"))
        ...
        cache.invalidate()  # after settings or content are saved
    """

    def __init__(self, maxsize: int = 256) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._entries: OrderedDict[_CacheKey, str] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _key(
        settings: SpeculationSettings, page: PageContext | None
    ) -> _CacheKey:
        category = page.category if page is not None else None
        # The URL only shows up in debug comments.
        url = (
            page.url if page is not None and settings.debug_enabled else None
        )
        return (settings, category, url)

    def render(
        self,
        settings: SpeculationSettings | None,
        page: PageContext | None = None,
    ) -> str:
        """Return the markup ``render_rules`` would produce.

        Args:
            settings: The active settings. None is never cached.
            page: The page being rendered.

        Returns:
            The markup block, possibly empty.
        """
        if settings is None:
            return ""

        key = self._key(settings, page)
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._hits += 1
                return self._entries[key]
            self._misses += 1

        markup = render_rules(settings, page)

        with self._lock:
            self._entries[key] = markup
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return markup

    def invalidate(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
            )
