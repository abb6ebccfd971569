"""Result caching for the mixscore CLI."""

import hashlib
import json
import pickle
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from .config import ScoringConfig
from .logging_config import get_logger
from .models import ReferenceProfile, ScoreResult

logger = get_logger(__name__)

# Bump this when ScoreResult schema or scoring semantics change to invalidate stale cache
CACHE_VERSION = 1


def cache_key(technical_data: dict, profile: ReferenceProfile, config: ScoringConfig) -> str:
    """MD5 of the canonical JSON of everything that determines a score."""
    payload = {
        "version": CACHE_VERSION,
        "technical_data": technical_data,
        "profile": asdict(profile),
        "config": asdict(config),
    }
    encoded = json.dumps(payload, sort_keys=True, default=repr).encode()
    return hashlib.md5(encoded).hexdigest()


class ResultCache:
    """Cache for score results."""

    def __init__(self, cache_dir: Optional[Path] = None):
        """Initialize cache.

        Args:
            cache_dir: Directory for cache files. Defaults to ./.mixscore/cache
        """
        if cache_dir is None:
            cache_dir = Path.cwd() / ".mixscore" / "cache"

        self.cache_dir = cache_dir
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Cache directory: %s", self.cache_dir)

    def get(self, key: str) -> Optional[ScoreResult]:
        """Get cached result, returning None if missing or stale."""
        cache_file = self.cache_dir / f"{key}.pkl"
        try:
            if not cache_file.exists():
                logger.debug("Cache miss: %s", key)
                return None

            with open(cache_file, "rb") as f:
                version, result = pickle.load(f)

            if version != CACHE_VERSION or not isinstance(result, ScoreResult):
                logger.debug("Cache stale (version %s != %s): %s", version, CACHE_VERSION, key)
                cache_file.unlink(missing_ok=True)
                return None

            logger.debug("Cache hit: %s", key)
            return result
        except Exception as e:
            logger.warning("Cache read error: %s", e)
            return None

    def set(self, key: str, result: ScoreResult):
        """Cache result under key."""
        try:
            with open(self.cache_dir / f"{key}.pkl", "wb") as f:
                pickle.dump((CACHE_VERSION, result), f)
            logger.debug("Cached result: %s", key)
        except Exception as e:
            logger.warning("Cache write error: %s", e)

    def clear(self):
        """Clear all cached results."""
        for cache_file in self.cache_dir.glob("*.pkl"):
            cache_file.unlink()
        logger.info("Cache cleared")
