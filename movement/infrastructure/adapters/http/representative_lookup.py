"""Representative lookup over the 5 Calls HTTP API.

Two adapters:
- FiveCallsRepresentativeLookup calls the remote API
- CachingRepresentativeLookup wraps any lookup with a key-value cache

Postal codes are validated before any request or cache access.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict
from typing import Any

import httpx
import structlog

from movement.application.ports.key_value_store import KeyValueStorePort
from movement.application.ports.representative_lookup import RepresentativeLookupPort
from movement.config.collaborator_config import (
    DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
    DEFAULT_FIVE_CALLS_API_URL,
    DEFAULT_REPRESENTATIVE_CACHE_TTL_SECONDS,
)
from movement.domain.errors.collaborator import (
    InvalidPostalCodeError,
    RepresentativeLookupError,
)
from movement.domain.models.campaign import TargetLevel
from movement.domain.models.representative import ContactChannels, Representative

log = structlog.get_logger()

POSTAL_CODE_PATTERN = re.compile(r"^\d{5}$")
CACHE_KEY_PREFIX = "reps:"

_LEVELS = {level.value: level for level in TargetLevel}


def validate_postal_code(postal_code: str) -> str:
    """Return the stripped postal code or raise InvalidPostalCodeError."""
    candidate = postal_code.strip()
    if not POSTAL_CODE_PATTERN.match(candidate):
        raise InvalidPostalCodeError(postal_code)
    return candidate


def _representative_from_payload(item: dict[str, Any]) -> Representative | None:
    level = _LEVELS.get(str(item.get("level", "")).lower())
    name = item.get("name")
    if level is None or not name:
        return None
    channels = item.get("channels") or {}
    accuracy = item.get("accuracy")
    return Representative(
        id=str(item.get("id") or name),
        name=str(name),
        office=str(item.get("office", "")),
        level=level,
        contact=ContactChannels(
            email=channels.get("email"),
            phone=channels.get("phone"),
            twitter=channels.get("twitter"),
            webform=channels.get("webform"),
        ),
        party=item.get("party") or None,
        accuracy=float(accuracy) if isinstance(accuracy, (int, float)) else None,
    )


class FiveCallsRepresentativeLookup:
    """RepresentativeLookupPort over the 5 Calls representatives endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_FIVE_CALLS_API_URL,
        api_key: str | None = None,
        timeout_seconds: float = DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the lookup adapter.

        Args:
            base_url: API base URL (without trailing slash).
            api_key: Optional bearer token.
            timeout_seconds: Request timeout.
            client: Shared client; a short-lived one is used per call if None.
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._client = client

    async def lookup(self, postal_code: str) -> list[Representative]:
        zip_code = validate_postal_code(postal_code)
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            if self._client is not None:
                response = await self._client.get(
                    f"{self._base_url}/representatives",
                    params={"zip": zip_code},
                    headers=headers,
                    timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(
                        f"{self._base_url}/representatives",
                        params={"zip": zip_code},
                        headers=headers,
                    )
        except httpx.HTTPError as exc:
            log.warning("representative_lookup_request_failed", error=str(exc))
            raise RepresentativeLookupError(zip_code, f"request failed: {exc}") from exc

        if response.status_code >= 300:
            log.warning(
                "representative_lookup_rejected",
                status_code=response.status_code,
            )
            raise RepresentativeLookupError(
                zip_code, f"provider returned {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise RepresentativeLookupError(zip_code, "invalid JSON response") from exc

        officials = payload.get("officials") if isinstance(payload, dict) else None
        if not isinstance(officials, list):
            raise RepresentativeLookupError(zip_code, "response has no officials list")

        representatives = [
            rep
            for rep in (
                _representative_from_payload(item)
                for item in officials
                if isinstance(item, dict)
            )
            if rep is not None
        ]
        log.info("representative_lookup_completed", count=len(representatives))
        return representatives


class CachingRepresentativeLookup:
    """Caches another lookup's results in a key-value store.

    Entries live under ``reps:<zip>`` for the configured TTL. An entry
    that cannot be decoded is treated as a miss and overwritten.
    """

    def __init__(
        self,
        inner: RepresentativeLookupPort,
        store: KeyValueStorePort,
        ttl_seconds: int = DEFAULT_REPRESENTATIVE_CACHE_TTL_SECONDS,
    ) -> None:
        self._inner = inner
        self._store = store
        self._ttl = ttl_seconds

    async def lookup(self, postal_code: str) -> list[Representative]:
        zip_code = validate_postal_code(postal_code)
        key = f"{CACHE_KEY_PREFIX}{zip_code}"

        cached = await self._store.get(key)
        if cached is not None:
            try:
                representatives = [
                    _decode_representative(item) for item in json.loads(cached)
                ]
            except (ValueError, KeyError, TypeError):
                log.warning("representative_cache_entry_invalid", key=key)
            else:
                log.debug("representative_cache_hit", key=key)
                return representatives

        representatives = await self._inner.lookup(zip_code)
        await self._store.set(
            key,
            json.dumps([asdict(rep) for rep in representatives]),
            ttl_seconds=self._ttl,
        )
        log.debug("representative_cache_stored", key=key, ttl_seconds=self._ttl)
        return representatives


def _decode_representative(item: dict[str, Any]) -> Representative:
    return Representative(
        id=item["id"],
        name=item["name"],
        office=item["office"],
        level=TargetLevel(item["level"]),
        contact=ContactChannels(**item["contact"]),
        party=item.get("party"),
        accuracy=item.get("accuracy"),
    )
