"""fortnite-api.com client.

Thin client for battle royale stats lookups:
- Lookup by display name or by account id
- Never raises to the caller; every reply is classified into a StatsOutcome
- One fixed courtesy pause on HTTP 429, no retry
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from fortnite_coach.integrations.fortnite.schemas import (
    PlayerStatsResult,
    StatsOutcome,
    normalize_stats_payload,
)

STATS_PATH = "v2/stats/br/v2"
RATE_LIMIT_BACKOFF_SECONDS = 2.0

UNAVAILABLE_MESSAGE = "Stats service unavailable"
PARSE_FAILED_MESSAGE = "Could not read stats response"
NO_DATA_MESSAGE = "No data available"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


def _is_missing_account(status: Any, error: str) -> bool:
    lowered = error.lower()
    return status == 404 or lowered == "invalid account" or "does not exist" in lowered


class FortniteApiClient:
    """Client for the fortnite-api.com stats endpoint.

    The API key goes into the Authorization header as-is (no Bearer scheme).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        api_key = (api_key or "").strip()
        if not api_key:
            raise ValueError("Fortnite API key is not set correctly in configuration.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._api_key,
            "Accept": "application/json",
        }

    def fetch_stats_by_name(self, username: str) -> PlayerStatsResult:
        """Fetch lifetime and per-input stats for a display name."""
        return self._fetch(STATS_PATH, params={"name": username}, display_name=username)

    def fetch_stats_by_account_id(self, account_id: str, display_name: str) -> PlayerStatsResult:
        """Fetch stats for a resolved Epic account id."""
        return self._fetch(
            f"{STATS_PATH}/{quote(account_id, safe='')}",
            params=None,
            display_name=display_name,
        )

    def _fetch(
        self,
        path: str,
        *,
        params: dict[str, str] | None,
        display_name: str,
    ) -> PlayerStatsResult:
        logger.info(f"[FORTNITE_API] Calling {path} for {display_name}")

        try:
            with httpx.Client(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = client.get(path, params=params)
        except httpx.RequestError as e:
            logger.error(f"[FORTNITE_API] Request failed for {display_name}: {e}")
            return PlayerStatsResult.failure(UNAVAILABLE_MESSAGE, StatsOutcome.UNAVAILABLE)

        logger.debug(f"[FORTNITE_API] Raw response for {display_name}: {resp.text}")

        if resp.status_code == 429:
            logger.warning(f"[FORTNITE_API] Rate limit hit, pausing {RATE_LIMIT_BACKOFF_SECONDS}s")
            self._sleep(RATE_LIMIT_BACKOFF_SECONDS)
            return PlayerStatsResult.failure(UNAVAILABLE_MESSAGE, StatsOutcome.UNAVAILABLE)

        if not resp.is_success:
            logger.warning(f"[FORTNITE_API] Non-success status code {resp.status_code} for {display_name}")
            return PlayerStatsResult.failure(UNAVAILABLE_MESSAGE, StatsOutcome.UNAVAILABLE)

        try:
            body = resp.json()
        except ValueError:
            logger.warning(f"[FORTNITE_API] Failed to parse API response for {display_name}")
            return PlayerStatsResult.failure(PARSE_FAILED_MESSAGE, StatsOutcome.PARSE_FAILED)

        if not isinstance(body, dict):
            logger.warning(f"[FORTNITE_API] Unexpected response shape for {display_name}")
            return PlayerStatsResult.failure(PARSE_FAILED_MESSAGE, StatsOutcome.PARSE_FAILED)

        status = body.get("status")
        if status != 200:
            error = str(body.get("error") or UNKNOWN_ERROR_MESSAGE)
            logger.warning(f"[FORTNITE_API] API returned error status {status}: {error} for {display_name}")
            outcome = StatsOutcome.NOT_FOUND if _is_missing_account(status, error) else StatsOutcome.PROVIDER_ERROR
            return PlayerStatsResult.failure(error, outcome)

        data = body.get("data")
        if not isinstance(data, dict):
            logger.warning(f"[FORTNITE_API] No data section in API response for {display_name}")
            return PlayerStatsResult.failure(NO_DATA_MESSAGE, StatsOutcome.PROVIDER_ERROR)

        stats = normalize_stats_payload(data, display_name)
        if stats is None:
            logger.warning(f"[FORTNITE_API] Failed to convert stats payload for {display_name}")
            return PlayerStatsResult.failure(PARSE_FAILED_MESSAGE, StatsOutcome.PARSE_FAILED)

        logger.info(
            f"[FORTNITE_API] Converted stats for {display_name}: name={stats.name}, "
            f"outcome={stats.outcome}, global_stats={stats.global_stats is not None}, "
            f"per_input={stats.per_input is not None}"
        )
        return stats
