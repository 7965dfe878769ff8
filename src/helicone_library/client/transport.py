# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Retrying JSON transport shared by both backends.

Every call returns an ApiResult. Transport failures and non-2xx responses
become error values; nothing raises past ``request()``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ..core.constants import DEFAULT_BASE_DELAY, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT
from ..core.types import ApiResult

lib_logger = logging.getLogger("helicone_library")

SleepFn = Callable[[float], Awaitable[None]]


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def unwrap_payload(payload: Any) -> ApiResult[Any]:
    """
    Interpret a decoded response body.

    An object carrying a ``data`` key is the service's ``{data, error}``
    envelope; anything else is a bare successful payload.
    """
    if isinstance(payload, dict) and "data" in payload:
        error = payload.get("error")
        if error:
            return ApiResult.failure(str(error))
        return ApiResult.success(payload.get("data"))
    return ApiResult.success(payload)


class RetryingTransport:
    """
    Authenticated JSON client with exponential backoff.

    Transient transport errors wait ``base_delay * 2**attempt`` before the next
    attempt. HTTP 429 waits ``Retry-After`` seconds when the header is present.
    A 429 on the final attempt is reported like any other non-2xx response.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
            transport=transport,
        )
        # Signed body URLs are pre-authorised; no bearer header
        self._body_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResult[Any]:
        last_error: Optional[str] = None
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            lib_logger.debug(f"{method} {path} (attempt {attempt + 1}/{attempts})")
            try:
                response = await self._client.request(
                    method, path, json=json, params=params
                )
            except httpx.TransportError as e:
                last_error = str(e) or type(e).__name__
                if attempt < self.max_retries:
                    wait_time = self.base_delay * (2**attempt)
                    lib_logger.info(
                        f"Request to {path} failed ({last_error}), retrying in {wait_time:.1f}s"
                    )
                    await self._sleep(wait_time)
                continue

            if response.status_code == 429 and attempt < self.max_retries:
                retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                wait_time = (
                    retry_after
                    if retry_after is not None
                    else self.base_delay * (2**attempt)
                )
                lib_logger.info(f"Rate limited on {path}, retrying in {wait_time:.1f}s")
                await self._sleep(wait_time)
                continue

            if not response.is_success:
                return ApiResult.failure(
                    f"API error {response.status_code}: {response.text}"
                )

            try:
                payload = response.json()
            except ValueError:
                return ApiResult.failure(
                    f"Invalid JSON response from {path}: {response.text[:100]}"
                )
            return unwrap_payload(payload)

        return ApiResult.failure(
            f"Request failed after {attempts} attempts: {last_error}"
        )

    async def fetch_json_object(self, url: str) -> Dict[str, Any]:
        """
        Unauthenticated GET of an absolute URL.

        Returns ``{}`` on any failure: network error, non-2xx, unparsable or
        non-object JSON.
        """
        try:
            response = await self._body_client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            lib_logger.debug(f"Signed body fetch failed: {e}")
            return {}
        if not response.is_success:
            lib_logger.debug(f"Signed body fetch returned HTTP {response.status_code}")
            return {}
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._body_client.aclose()
