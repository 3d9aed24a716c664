"""
Hostaway API client (external system of record for listings and reservations).

Authentication: Bearer API key per account.
Listing responses are cached per account for an hour (best effort, see services.cache);
reservations are always fetched live. Any transport error or non-2xx response raises
UpstreamUnavailable; nothing is retried inline, the next scheduled sync retries.
"""
from __future__ import annotations

import logging
from datetime import date

import httpx
from pydantic import ValidationError

from cleanops.config import AccountCredentials, Settings
from cleanops.errors import UpstreamUnavailable
from cleanops.schemas.hostaway import ListingDTO, ReservationDTO
from cleanops.services.cache import ListingsCache, listings_cache_key

logger = logging.getLogger("uvicorn.error")

DEFAULT_BASE_URL = "https://api.hostaway.com/v1"


class HostawayClient:
    def __init__(
        self,
        api_key: str,
        account_id: str,
        base_url: str | None = None,
        cache: ListingsCache | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key
        self.account_id = account_id
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.cache = cache
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def for_account(
        cls,
        credentials: AccountCredentials,
        settings: Settings,
        cache: ListingsCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "HostawayClient":
        return cls(
            credentials.api_key,
            credentials.account_id,
            base_url=settings.hostaway_api_url,
            cache=cache,
            timeout=settings.hostaway_timeout_seconds,
            transport=transport,
        )

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self.timeout,
            transport=self.transport,
        )

    def _get(self, path: str, params: dict | None = None):
        """GET path and return the `result` member of the response envelope."""
        try:
            with self._client() as client:
                r = client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error("Hostaway request failed: account=%s path=%s error=%s", self.account_id, path, e)
            raise UpstreamUnavailable(f"Hostaway request to {path} failed: {e}") from e
        if not 200 <= r.status_code < 300:
            body = r.text[:500]
            logger.error(
                "Hostaway API error: account=%s path=%s status=%s body=%s",
                self.account_id, path, r.status_code, body,
            )
            try:
                payload = r.json()
            except ValueError:
                payload = None
            raise UpstreamUnavailable(
                f"Hostaway returned {r.status_code} for {path}",
                upstream_status=r.status_code,
                response=payload if isinstance(payload, dict) else None,
            )
        try:
            payload = r.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Hostaway returned non-JSON body for {path}") from e
        return (payload or {}).get("result")

    def list_listings(self) -> list[ListingDTO]:
        key = listings_cache_key(self.account_id)
        raw = self.cache.get(key) if self.cache else None
        if raw is None:
            raw = self._get("/listings") or []
            if self.cache:
                self.cache.set(key, raw)
        return _parse_many(ListingDTO, raw, "listing", self.account_id)

    def list_reservations(self, start_date: date, end_date: date) -> list[ReservationDTO]:
        raw = self._get(
            "/reservations",
            params={
                "arrivalStartDate": start_date.isoformat(),
                "arrivalEndDate": end_date.isoformat(),
            },
        ) or []
        return _parse_many(ReservationDTO, raw, "reservation", self.account_id)

    def get_reservation(self, reservation_id: str) -> ReservationDTO:
        raw = self._get(f"/reservations/{reservation_id}")
        if not raw:
            raise UpstreamUnavailable(f"Hostaway returned no reservation {reservation_id}")
        return ReservationDTO.model_validate(raw)


def _parse_many(model, rows, kind: str, account_id: str) -> list:
    """Validate each row; a malformed row is skipped with a warning, not fatal for the batch."""
    out = []
    for row in rows:
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed Hostaway %s for account %s (id=%s): %s",
                kind, account_id, (row or {}).get("id") if isinstance(row, dict) else None, e,
            )
    return out
