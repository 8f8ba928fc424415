"""SerpAPI client for Google Maps popular times.

Uses the SerpAPI google_maps engine: the first local result's
``popular_times.graph_results`` holds, per weekday, a list of
``{"time": "6 AM", "busyness_score": 35}`` entries. Those are parsed into
24 hourly values per weekday ("Monday" .. "Sunday").
"""
import logging
import re
import time
from typing import Any, Optional

import httpx

from app.metrics import (
    SERPAPI_API_CALLS_TOTAL,
    SERPAPI_API_CALL_DURATION_SECONDS,
    SERPAPI_API_ERRORS_TOTAL,
)
from app.models import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

SERPAPI_BASE_URL = "https://serpapi.com/search"

_TIME_LABEL_RE = re.compile(r"^\s*(\d{1,2})\s*(?::\d{2})?\s*([AaPp])\.?\s*[Mm]\.?\s*$")


def parse_hour_label(label: str) -> Optional[int]:
    """Convert "6 AM" / "12 PM" / "11:00 pm" to an hour of the day (0-23)."""
    match = _TIME_LABEL_RE.match(label or "")
    if not match:
        return None
    hour = int(match.group(1))
    if hour < 1 or hour > 12:
        return None
    is_pm = match.group(2).lower() == "p"
    hour = hour % 12
    return hour + 12 if is_pm else hour


def parse_popular_times(popular_times: dict[str, Any]) -> Optional[dict[str, list[int]]]:
    """Parse a SerpAPI popular_times block into 24 values per weekday name.

    Hours SerpAPI does not list (usually closed hours) are 0. Scores are
    clamped to [0, 100].

    Returns:
        {"Monday": [24 ints], ...} or None if no weekday could be parsed
    """
    graph = popular_times.get("graph_results") if isinstance(popular_times, dict) else None
    if not isinstance(graph, dict):
        return None

    by_lower = {str(k).lower(): v for k, v in graph.items()}
    week: dict[str, list[int]] = {}
    for name in WEEKDAY_NAMES:
        entries = by_lower.get(name.lower())
        if not isinstance(entries, list):
            continue
        curve = [0] * 24
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            hour = parse_hour_label(str(entry.get("time", "")))
            if hour is None:
                continue
            try:
                score = int(entry.get("busyness_score", 0) or 0)
            except (TypeError, ValueError):
                continue
            curve[hour] = max(0, min(100, score))
        week[name] = curve

    if not week:
        return None

    # Days SerpAPI omits are days the venue is closed
    for name in WEEKDAY_NAMES:
        week.setdefault(name, [0] * 24)
    return week


class SerpApiClient:
    """Async HTTP client for the SerpAPI Google Maps engine."""

    def __init__(self, api_key: str, base_url: str = SERPAPI_BASE_URL, timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def fetch_popular_times(
        self, venue_name: str, location: str
    ) -> Optional[dict[str, list[int]]]:
        """Fetch weekly popular times for a venue.

        Args:
            venue_name: Venue name (e.g. "Cocktail Bar")
            location: Free-text location (e.g. "Fortitude Valley, Brisbane")

        Returns:
            {"Monday": [24 ints], ...}, or None when no key is configured,
            the request fails, or Google has no popular times for the place.
        """
        if not self.api_key:
            logger.debug("[SerpAPI] No API key configured, skipping popular times")
            return None

        params = {
            "engine": "google_maps",
            "q": f"{venue_name} {location} popular times",
            "type": "search",
            "api_key": self.api_key,
        }

        start_time = time.perf_counter()
        endpoint = "popular_times"

        try:
            response = await self.client.get(self.base_url, params=params)

            if response.status_code == 429:
                SERPAPI_API_ERRORS_TOTAL.labels(
                    endpoint=endpoint, error_type="quota_exceeded"
                ).inc()
                logger.error("[SerpAPI] Rate limit exceeded (429)")
                return None

            response.raise_for_status()

            duration = time.perf_counter() - start_time
            SERPAPI_API_CALL_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration)
            SERPAPI_API_CALLS_TOTAL.labels(endpoint=endpoint, status="success").inc()

            data = response.json()

            local_results = data.get("local_results") or []
            if not local_results:
                logger.info(f"[SerpAPI] No local results for '{venue_name}'")
                return None

            popular_times = local_results[0].get("popular_times")
            if not popular_times:
                logger.info(f"[SerpAPI] No popular times for '{venue_name}'")
                return None

            week = parse_popular_times(popular_times)
            if week is None:
                logger.warning(f"[SerpAPI] Unparseable popular times for '{venue_name}'")
                return None

            logger.info(f"[SerpAPI] Fetched popular times for '{venue_name}'")
            return week

        except httpx.TimeoutException as e:
            duration = time.perf_counter() - start_time
            SERPAPI_API_CALL_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration)
            SERPAPI_API_CALLS_TOTAL.labels(endpoint=endpoint, status="error").inc()
            SERPAPI_API_ERRORS_TOTAL.labels(endpoint=endpoint, error_type="timeout").inc()
            logger.error(f"[SerpAPI] Timeout fetching popular times for '{venue_name}': {e}")
            return None

        except httpx.HTTPStatusError as e:
            duration = time.perf_counter() - start_time
            SERPAPI_API_CALL_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration)
            SERPAPI_API_CALLS_TOTAL.labels(endpoint=endpoint, status="error").inc()
            SERPAPI_API_ERRORS_TOTAL.labels(endpoint=endpoint, error_type="http_error").inc()
            logger.error(f"[SerpAPI] HTTP error fetching popular times for '{venue_name}': {e}")
            return None

        except Exception as e:
            duration = time.perf_counter() - start_time
            SERPAPI_API_CALL_DURATION_SECONDS.labels(endpoint=endpoint).observe(duration)
            SERPAPI_API_CALLS_TOTAL.labels(endpoint=endpoint, status="error").inc()
            SERPAPI_API_ERRORS_TOTAL.labels(endpoint=endpoint, error_type="connection_error").inc()
            logger.error(f"[SerpAPI] Error fetching popular times for '{venue_name}': {e}")
            return None
