"""Stats retrieval pipeline.

cache lookup -> provider call -> normalization -> one-shot fallback -> cache store
"""

from __future__ import annotations

from loguru import logger

from fortnite_coach.core.cache import TTLCache
from fortnite_coach.integrations.fortnite.client import FortniteApiClient
from fortnite_coach.integrations.fortnite.schemas import PlayerStatsResult, StatsOutcome

STATS_CACHE_TTL_SECONDS = 5 * 60

EMPTY_USERNAME_MESSAGE = "Username cannot be empty"
NO_STATS_MESSAGE = "No player stats available. Please check the username and try again."


def stats_cache_key(username: str) -> str:
    return f"stats:{username.lower()}"


class StatsService:
    """Resolves a username into a PlayerStatsResult."""

    def __init__(self, client: FortniteApiClient, cache: TTLCache) -> None:
        self._client = client
        self._cache = cache

    def get_stats(self, raw_username: str | None) -> PlayerStatsResult:
        """Get stats for a username.

        Never raises for provider problems; the result's outcome says what happened.

        Args:
            raw_username: Username as typed by the user

        Returns:
            PlayerStatsResult, successful or failed
        """
        if raw_username is None or not raw_username.strip():
            logger.warning("[STATS] Empty username provided")
            return PlayerStatsResult.failure(EMPTY_USERNAME_MESSAGE, StatsOutcome.INVALID_INPUT)

        username = raw_username.strip()
        cache_key = stats_cache_key(username)

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"[STATS] Cache hit for {username}")
            return cached

        logger.info(f"[STATS] Cache miss for {username}, fetching from API")
        stats = self._client.fetch_stats_by_name(username)

        if stats.result:
            if stats.has_meaningful_stats:
                self._store(cache_key, stats)
                return stats

            logger.info(f"[STATS] {username} resolved but stats are empty; trying fallback lookup")
            alt = self._lookup_alternate(username, stats.account_id)
            if alt.result and alt.has_meaningful_stats:
                self._store(cache_key, alt)
                return alt

            logger.info(f"[STATS] Fallback had no stats either; returning empty result for {username}")
            return stats

        if stats.outcome == StatsOutcome.NOT_FOUND:
            logger.info(f"[STATS] Account not found for {username}; trying fallback lookup")
            alt = self._lookup_alternate(username, None)
            if alt.result:
                self._store(cache_key, alt)
                return alt
            return PlayerStatsResult.failure(NO_STATS_MESSAGE, StatsOutcome.NOT_FOUND)

        logger.warning(f"[STATS] Lookup failed for {username}: outcome={stats.outcome}, error={stats.error}")
        return stats

    def _lookup_alternate(self, username: str, account_id: str | None) -> PlayerStatsResult:
        if account_id:
            logger.info(f"[STATS] Fallback lookup by account id {account_id}")
            return self._client.fetch_stats_by_account_id(account_id, username)
        logger.info(f"[STATS] Fallback lookup by name for {username}")
        return self._client.fetch_stats_by_name(username)

    def _store(self, cache_key: str, stats: PlayerStatsResult) -> None:
        if not stats.result or not stats.has_meaningful_stats:
            return
        self._cache.set(cache_key, stats, STATS_CACHE_TTL_SECONDS)
        logger.info(f"[STATS] Cached stats under {cache_key}")
