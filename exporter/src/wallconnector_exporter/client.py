"""Async client for the Wall Connector local status API."""

import json
import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from wallconnector_core.schemas import Lifetime, StatusRecord, Version, Vitals, Wifi


logger = logging.getLogger(__name__)

VITALS_PATH = "/api/1/vitals"
LIFETIME_PATH = "/api/1/lifetime"
VERSION_PATH = "/api/1/version"
WIFI_PATH = "/api/1/wifi_status"

T = TypeVar("T", bound=StatusRecord)


class FetchError(Exception):
    """The device answered but the body could not be decoded."""


class WallConnectorClient:
    """Reads status records from one Wall Connector.

    Each call opens its own ``httpx.AsyncClient``, so the client can be used
    from any event loop. ``transport`` replaces the network, mostly for tests.
    """

    def __init__(
        self,
        target: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = target if "://" in target else f"http://{target}"
        self.timeout = timeout
        self.transport = transport

    def _timeout(self, deadline: Optional[float]) -> float:
        if deadline is None:
            return self.timeout
        return min(self.timeout, deadline)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get(self, path: str, timeout: float) -> httpx.Response:
        logger.debug(f"GET {self.base_url}{path} (timeout {timeout}s)")
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self.transport,
            headers={"Accept": "application/json"},
        ) as client:
            response = await client.get(path)
            response.raise_for_status()
            return response

    async def call_api(self, path: str, model: Type[T], timeout: Optional[float] = None) -> T:
        response = await self._get(path, self._timeout(timeout))
        try:
            return model.model_validate(response.json())
        except (json.JSONDecodeError, ValidationError) as e:
            raise FetchError(f"invalid {path} response: {e}") from e

    async def vitals(self, timeout: Optional[float] = None) -> Vitals:
        """Current vitals of the wall connector."""
        return await self.call_api(VITALS_PATH, Vitals, timeout)

    async def lifetime(self, timeout: Optional[float] = None) -> Lifetime:
        """Lifetime stats of the wall connector."""
        return await self.call_api(LIFETIME_PATH, Lifetime, timeout)

    async def version(self, timeout: Optional[float] = None) -> Version:
        """Firmware and hardware versions of the wall connector."""
        return await self.call_api(VERSION_PATH, Version, timeout)

    async def wifi(self, timeout: Optional[float] = None) -> Wifi:
        """WiFi status of the wall connector."""
        return await self.call_api(WIFI_PATH, Wifi, timeout)
