"""
Duffel API Client
SkyRoute - Upstream flight distribution API

Bearer-token authenticated JSON calls to the Duffel Air API. Callers get
the raw status and decoded body back; deciding what a non-2xx status means
is left to them.
"""

import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx

from skyroute.core.config import Settings
from skyroute.core.errors import UpstreamError, UpstreamTimeoutError
from skyroute.core.metrics import track_external_api

logger = logging.getLogger("DuffelClient")


class UpstreamResponse(NamedTuple):
    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class DuffelClient:
    """
    UpstreamClient implementation over httpx.

    Pass a shared AsyncClient to reuse its connection pool; without one a
    short-lived client is opened per call.
    """

    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self._token = settings.require_token()
        self._version = settings.duffel_api_version
        self._base_url = settings.duffel_base_url.rstrip("/")
        self._default_timeout = settings.search_timeout
        self._http = http

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Duffel-Version": self._version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def post(
        self,
        path: str,
        body: Dict[str, Any],
        timeout: Optional[float] = None,
        operation: str = "offer_request"
    ) -> UpstreamResponse:
        return await self._request("POST", path, body=body, timeout=timeout, operation=operation)

    async def get(
        self,
        path: str,
        timeout: Optional[float] = None,
        operation: str = "offer"
    ) -> UpstreamResponse:
        return await self._request("GET", path, timeout=timeout, operation=operation)

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        operation: str = "upstream"
    ) -> UpstreamResponse:
        url = f"{self._base_url}{path}"
        kwargs: Dict[str, Any] = {
            "headers": self.headers,
            "timeout": timeout or self._default_timeout,
        }
        if body is not None:
            kwargs["json"] = body

        with track_external_api(operation) as call:
            try:
                if self._http is not None:
                    response = await self._http.request(method, url, **kwargs)
                else:
                    async with httpx.AsyncClient() as client:
                        response = await client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                logger.warning(f"⏱️ Duffel {method} {path} timed out")
                raise UpstreamTimeoutError(f"Upstream timed out: {path}") from e
            except httpx.HTTPError as e:
                logger.error(f"❌ Duffel {method} {path} transport error: {e}")
                raise UpstreamError(f"Upstream request failed: {e}") from e
            call.record_response(response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not 200 <= response.status_code < 300:
            logger.error(
                f"Duffel {method} {path} failed: {response.status_code} - {response.text[:200]}"
            )

        return UpstreamResponse(status=response.status_code, data=data)
