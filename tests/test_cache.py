"""
Tests for the content definition cache.
"""

import os
import time

from xmlcontent_api.content.cache import DefinitionCache

from .conftest import ARTICLE_LOCATION


class TestDefinitionCache:

    def test_miss_then_hit(self, schema_root, article_definition):
        cache = DefinitionCache()
        schema_file = schema_root / "system" / "schemas" / "article.xsd"

        assert cache.get(ARTICLE_LOCATION, schema_file) is None
        cache.put(ARTICLE_LOCATION, schema_file, article_definition)

        assert cache.get(ARTICLE_LOCATION, schema_file) is article_definition
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    def test_changed_file_invalidates(self, schema_root, article_definition):
        cache = DefinitionCache()
        schema_file = schema_root / "system" / "schemas" / "article.xsd"
        cache.put(ARTICLE_LOCATION, schema_file, article_definition)

        schema_file.write_text(schema_file.read_text(encoding="utf-8") + "\n", encoding="utf-8")

        assert cache.get(ARTICLE_LOCATION, schema_file) is None
        assert cache.stats()["size"] == 0

    def test_deleted_file_invalidates(self, schema_root, article_definition):
        cache = DefinitionCache()
        schema_file = schema_root / "system" / "schemas" / "article.xsd"
        cache.put(ARTICLE_LOCATION, schema_file, article_definition)

        os.remove(schema_file)

        assert cache.get(ARTICLE_LOCATION, schema_file) is None

    def test_ttl_expiry(self, schema_root, article_definition):
        cache = DefinitionCache(ttl_seconds=0)
        schema_file = schema_root / "system" / "schemas" / "article.xsd"
        cache.put(ARTICLE_LOCATION, schema_file, article_definition)
        time.sleep(0.01)

        assert cache.get(ARTICLE_LOCATION, schema_file) is None

    def test_lru_eviction(self, schema_root, article_definition):
        cache = DefinitionCache(max_size=2)
        nested = schema_root / "system" / "schemas" / "nested"

        cache.put("a", nested / "paragraph.xsd", article_definition)
        cache.put("b", nested / "media.xsd", article_definition)
        cache.put("c", nested / "highlight.xsd", article_definition)

        assert cache.stats()["size"] == 2
        assert cache.get("a", nested / "paragraph.xsd") is None
        assert cache.get("c", nested / "highlight.xsd") is article_definition

    def test_clear(self, schema_root, article_definition):
        cache = DefinitionCache()
        schema_file = schema_root / "system" / "schemas" / "article.xsd"
        cache.put(ARTICLE_LOCATION, schema_file, article_definition)
        cache.invalidate(ARTICLE_LOCATION)
        assert cache.stats()["size"] == 0

        cache.put(ARTICLE_LOCATION, schema_file, article_definition)
        cache.clear()
        assert cache.stats() == {"size": 0, "max_size": 100, "ttl_seconds": 300, "hits": 0, "misses": 0}

    def test_replacing_entry_in_full_cache_keeps_others(self, schema_root, article_definition):
        cache = DefinitionCache(max_size=2)
        nested = schema_root / "system" / "schemas" / "nested"

        cache.put("a", nested / "paragraph.xsd", article_definition)
        cache.put("b", nested / "media.xsd", article_definition)
        cache.put("a", nested / "paragraph.xsd", article_definition)

        assert cache.stats()["size"] == 2
        assert cache.get("b", nested / "media.xsd") is article_definition
