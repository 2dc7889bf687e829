"""Tests for the result cache."""

import pytest

from pagewarp.cache import CacheKey, InMemoryResultCache, content_identity
from pagewarp.structures import PageTranslation


def _translation(text="x"):
    return PageTranslation(paragraphs=((text,),), source_language="en", target_language="fr")


def _key(content_id="page-1", target="fr"):
    return CacheKey(provider="custom-1", source_language="auto", target_language=target, content_id=content_id)


class TestContentIdentity:
    def test_stable(self):
        assert content_identity([["a", "b"]]) == content_identity((("a", "b"),))

    def test_group_boundaries_matter(self):
        assert content_identity([["a", "b"]]) != content_identity([["a"], ["b"]])


class TestCacheKey:
    def test_as_string(self):
        assert _key().as_string() == "custom-1:auto:fr:page-1"


class TestInMemoryResultCache:
    @pytest.mark.asyncio
    async def test_get_put(self):
        cache = InMemoryResultCache()

        assert await cache.get(_key()) is None
        await cache.put(_key(), _translation())

        assert await cache.get(_key()) == _translation()
        assert await cache.get(_key(target="de")) is None

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self):
        cache = InMemoryResultCache(max_entries=2)
        await cache.put(_key("a"), _translation("a"))
        await cache.put(_key("b"), _translation("b"))
        await cache.get(_key("a"))
        await cache.put(_key("c"), _translation("c"))

        assert len(cache) == 2
        assert await cache.get(_key("b")) is None
        assert await cache.get(_key("a")) == _translation("a")

    @pytest.mark.asyncio
    async def test_clear(self):
        cache = InMemoryResultCache()
        await cache.put(_key(), _translation())

        cache.clear()

        assert len(cache) == 0
