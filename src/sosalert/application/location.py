"""Location provider adapter: one time-bounded request per call."""

import asyncio
import logging

from sosalert.application.ports import LocationSource
from sosalert.domain import Coordinates, LocationTimeout, LocationUnsupported

logger = logging.getLogger(__name__)


class LocationProvider:
    """Wraps a LocationSource, normalizing every outcome to Coordinates or a LocationError.

    A provider without a source reports LocationUnsupported.
    """

    def __init__(self, source: LocationSource | None = None) -> None:
        self._source = source

    @property
    def source(self) -> LocationSource | None:
        return self._source

    async def acquire(self, timeout: float) -> Coordinates:
        """Return the current position or raise LocationUnsupported, LocationDenied or LocationTimeout.

        The pending request is cancelled when the timeout elapses.
        """
        if timeout is None or timeout <= 0:
            raise ValueError("Location timeout must be a positive number of seconds.")
        if self._source is None:
            raise LocationUnsupported("No location capability configured.")
        try:
            return await asyncio.wait_for(self._source.current_position(), timeout)
        except asyncio.TimeoutError as e:
            logger.info("Location request timed out after %.1fs", timeout)
            raise LocationTimeout(f"No position fix within {timeout}s.") from e
