"""Listing gateway wrapping the external listing-search and listing-detail webhooks.

Search is single-shot and raises GatewayError on failure. Detail lookups go
through a RetryPolicy and resolve to None once every attempt has failed, so
callers always get a clean optional result.
"""

from __future__ import annotations

import logging

import httpx

from realyield.agents.search.contracts import Listing, PropertyDetail, SearchCriteria
from realyield.app.config import Settings, get_settings
from realyield.services.retry_policy import RetryExhaustedError, RetryPolicy

logger = logging.getLogger(__name__)

PLACEHOLDER_LINK = "#"
DEFAULT_TITLE = "No Title"
DEFAULT_PRICE = "Price not specified"


class GatewayError(Exception):
    """Listing search failed: non-success status, unreadable body or transport error."""

    def __init__(self, status_code: int | None, body: str = ""):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Listing search failed: {body}"
        else:
            message = f"Listing search failed – status {status_code}"
        super().__init__(message)


class TransientFetchFailure(Exception):
    """One detail attempt failed with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Detail webhook error: {status_code}")


class ListingGateway:
    """Async client for the listing provider."""

    def __init__(
        self,
        settings: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.search_url = settings.listing_search_url
        self.detail_url = settings.listing_detail_url
        self.user_agent = settings.gateway_user_agent
        self.timeout = settings.gateway_timeout_seconds
        self.max_listings = settings.max_listings
        self.probe_link = settings.connectivity_probe_link
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.detail_max_attempts,
            base_delay_ms=settings.detail_backoff_base_ms,
            max_delay_ms=settings.detail_backoff_cap_ms,
            retry_on=(httpx.HTTPError, TransientFetchFailure, ValueError),
        )

    @property
    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    @staticmethod
    def build_search_payload(criteria: SearchCriteria) -> dict:
        """Request body with only the criteria the provider understands."""
        payload: dict = {}
        if criteria.area:
            payload["area"] = criteria.area
        if criteria.bedrooms:
            if criteria.bedrooms.strip().lower() == "studio":
                payload["bedrooms"] = 0
            else:
                try:
                    payload["bedrooms"] = int(criteria.bedrooms)
                except ValueError:
                    pass
        if criteria.max_price is not None:
            payload["maxPrice"] = criteria.max_price
        return payload

    async def search(self, criteria: SearchCriteria) -> list[Listing]:
        """Fetch up to ``max_listings`` listings matching ``criteria``."""
        payload = self.build_search_payload(criteria)
        if not payload:
            logger.info("[search] No usable criteria for the listing webhook, returning empty results")
            return []

        logger.info("[search] Calling listing webhook with payload: %s", payload)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.search_url, json=payload, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("[search] Listing webhook request failed: %s", exc)
            raise GatewayError(None, str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            logger.error(
                "[search] Listing webhook failed – status %d, body: %s",
                resp.status_code, resp.text[:500],
            )
            raise GatewayError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("[search] Listing webhook returned invalid JSON: %s", resp.text[:500])
            raise GatewayError(resp.status_code, resp.text) from exc

        items = self._extract_listing_items(data)
        if items is None:
            logger.warning("[search] Listing webhook response format not recognized: %s", str(data)[:500])
            return []

        listings = self._normalize(items)
        logger.info("[search] Received %d valid listings", len(listings))
        return listings

    @staticmethod
    def _extract_listing_items(data) -> list | None:
        """Find the listings array: bare list, then ``listings``, then ``data.listings``."""
        if isinstance(data, list):
            return data
        if not isinstance(data, dict):
            return None
        if isinstance(data.get("listings"), list):
            return data["listings"]
        nested = data.get("data")
        if isinstance(nested, dict) and isinstance(nested.get("listings"), list):
            return nested["listings"]
        return None

    def _normalize(self, items: list) -> list[Listing]:
        listings: list[Listing] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            link = item.get("link") or PLACEHOLDER_LINK
            if link == PLACEHOLDER_LINK:
                continue
            listings.append(Listing(
                title=str(item.get("title") or DEFAULT_TITLE),
                price=str(item.get("price") or DEFAULT_PRICE),
                link=str(link),
            ))
            if len(listings) >= self.max_listings:
                break
        return listings

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    async def fetch_detail(self, link: str) -> PropertyDetail | None:
        """Fetch one listing's detail, retrying per the policy; None when unavailable."""
        logger.info("[fetch_detail] Fetching detail for %s", link)
        try:
            return await self.retry_policy.run(
                lambda: self._fetch_detail_once(link),
                label="fetch_detail",
            )
        except RetryExhaustedError as exc:
            logger.error("[fetch_detail] All %d attempts failed. Last error: %s", exc.attempts, exc.last_error)
            return None

    async def _fetch_detail_once(self, link: str) -> PropertyDetail:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(self.detail_url, json={"link": link}, headers=self._headers)

        if not 200 <= resp.status_code < 300:
            raise TransientFetchFailure(resp.status_code, resp.text[:500])

        detail = PropertyDetail.from_payload(resp.json())
        logger.info("[fetch_detail] Received detail for %s", link)
        return detail

    async def check_reachable(self) -> bool:
        """Send one canary request; any status below 500 counts as reachable."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.detail_url, json={"link": self.probe_link}, headers=self._headers,
                )
        except httpx.HTTPError as exc:
            logger.error("[check_reachable] Failed to connect to detail webhook: %s", exc)
            return False

        logger.info("[check_reachable] Detail webhook probe status=%d", resp.status_code)
        return resp.status_code < 500
