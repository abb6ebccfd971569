import pickle

import pytest

from mixscore.cache import CACHE_VERSION, ResultCache, cache_key
from mixscore.config import DEFAULT_CONFIG, ScoringConfig
from mixscore.engine import MixScorer


@pytest.fixture
def cache(tmp_path):
    return ResultCache(tmp_path / "cache")


@pytest.fixture
def result(profile, ideal_track):
    return MixScorer().score(ideal_track, profile)


class TestCacheKey:
    def test_deterministic(self, profile, ideal_track):
        assert cache_key(ideal_track, profile, DEFAULT_CONFIG) == cache_key(
            dict(ideal_track), profile, ScoringConfig()
        )

    def test_depends_on_inputs(self, profile, ideal_track):
        base = cache_key(ideal_track, profile, DEFAULT_CONFIG)
        assert cache_key(dict(ideal_track, lra=5.0), profile, DEFAULT_CONFIG) != base
        assert cache_key(ideal_track, profile, ScoringConfig(curve="linear")) != base


class TestResultCache:
    def test_miss(self, cache):
        assert cache.get("missing") is None

    def test_round_trip(self, cache, result):
        cache.set("abc", result)
        assert cache.get("abc") == result

    def test_stale_version_dropped(self, cache, result):
        path = cache.cache_dir / "old.pkl"
        with open(path, "wb") as f:
            pickle.dump((CACHE_VERSION - 1, result), f)
        assert cache.get("old") is None
        assert not path.exists()

    def test_corrupt_entry_is_miss(self, cache):
        (cache.cache_dir / "bad.pkl").write_bytes(b"not a pickle")
        assert cache.get("bad") is None

    def test_clear(self, cache, result):
        cache.set("a", result)
        cache.set("b", result)
        cache.clear()
        assert list(cache.cache_dir.glob("*.pkl")) == []
