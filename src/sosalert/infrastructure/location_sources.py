"""Location sources: where a position fix comes from in each host environment."""

import asyncio
import logging

import aiohttp

from sosalert.domain import Coordinates, LocationDenied, LocationUnsupported

logger = logging.getLogger(__name__)


class StaticLocationSource:
    """Always returns the configured fix (e.g. a fixed installation address)."""

    def __init__(self, coordinates: Coordinates) -> None:
        self._coordinates = coordinates

    async def current_position(self) -> Coordinates:
        return self._coordinates


class UnsupportedLocationSource:
    """Host with no location capability."""

    async def current_position(self) -> Coordinates:
        raise LocationUnsupported("Geolocation not supported")


class ClientReportedLocationSource:
    """Position reported by a remote client (browser or app) through a callback.

    current_position() suspends until report(), deny() or unsupported() is
    called, or returns at once if a report is already there. reset() discards
    the report for a new flow instance.
    """

    def __init__(self) -> None:
        self._outcome: Coordinates | Exception | None = None
        self._waiter: asyncio.Future | None = None

    @property
    def has_report(self) -> bool:
        return self._outcome is not None

    def _settle(self, outcome: Coordinates | Exception) -> None:
        self._outcome = outcome
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(outcome)

    def report(self, coordinates: Coordinates) -> None:
        self._settle(coordinates)

    def deny(self) -> None:
        self._settle(LocationDenied("Could not get location"))

    def unsupported(self) -> None:
        self._settle(LocationUnsupported("Geolocation not supported"))

    def reset(self) -> None:
        waiter = self._waiter
        self._outcome = None
        self._waiter = None
        # Wake a pending request; its flow instance is gone and ignores the result.
        if waiter is not None and not waiter.done():
            waiter.set_result(LocationDenied("Location request discarded"))

    async def current_position(self) -> Coordinates:
        outcome = self._outcome
        if outcome is None:
            waiter = asyncio.get_running_loop().create_future()
            self._waiter = waiter
            try:
                outcome = await waiter
            finally:
                if self._waiter is waiter:
                    self._waiter = None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class IpGeolocationSource:
    """Coarse fix from an IP geolocation endpoint returning {"lat": .., "lon": ..} JSON.

    Any network or payload problem is reported as LocationDenied; the caller's
    timeout bounds the request as a whole.
    """

    def __init__(self, url: str, http_timeout: float = 5.0) -> None:
        self._url = url
        self._http_timeout = http_timeout

    async def _fetch(self) -> dict:
        timeout = aiohttp.ClientTimeout(total=self._http_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self._url, headers={"Accept": "application/json"}) as resp:
                if resp.status != 200:
                    raise LocationDenied(f"Geolocation endpoint returned status {resp.status}")
                return await resp.json(content_type=None)

    async def current_position(self) -> Coordinates:
        try:
            data = await self._fetch()
        except LocationDenied as e:
            logger.warning("IP geolocation failed: %s", e)
            raise
        except asyncio.TimeoutError as e:
            logger.warning("IP geolocation timeout")
            raise LocationDenied("Could not get location") from e
        except aiohttp.ClientError as e:
            logger.warning("IP geolocation network error: %s", e)
            raise LocationDenied("Could not get location") from e
        except Exception as e:
            logger.warning("IP geolocation unexpected error: %s", e, exc_info=True)
            raise LocationDenied("Could not get location") from e
        if not isinstance(data, dict):
            raise LocationDenied("Could not get location")
        lat = data.get("lat", data.get("latitude"))
        lng = data.get("lon", data.get("lng", data.get("longitude")))
        try:
            return Coordinates(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError) as e:
            raise LocationDenied("Could not get location") from e
