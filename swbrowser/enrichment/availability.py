"""Availability tracking for SWAPI.

Remembers whether SWAPI answered recently so that a batch of enrichments does
not fire a doomed request per entity while the service is down. State is
refreshed by a probe request at most once per check interval; the operator
can force an immediate re-probe with ``reset()``.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from swbrowser.enrichment.models import AvailabilityStatus
from swbrowser.enrichment.swapi_client import SwapiClient
from swbrowser.utils.logger import LoggerManager


DEFAULT_CHECK_INTERVAL = 60.0
DEFAULT_PROBE_PATH = "people/1/"  # Luke Skywalker

logger = LoggerManager.get_logger(__name__)


class AvailabilityTracker:
    """Time-windowed reachability check for SWAPI.

    Attributes:
        reachable: Last known reachability
        last_checked_at: Epoch seconds of the last probe or failure mark
        consecutive_failures: Transient failures since the last success
    """

    def __init__(
        self,
        client: SwapiClient,
        check_interval: float = DEFAULT_CHECK_INTERVAL,
        probe_path: str = DEFAULT_PROBE_PATH,
        failure_threshold: int = 1,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the tracker.

        Args:
            client: SWAPI client used for probes
            check_interval: Seconds a probe result stays fresh
            probe_path: Resource fetched as the probe
            failure_threshold: Consecutive transient failures that mark SWAPI down
            clock: Time source returning epoch seconds
        """
        self.client = client
        self.check_interval = check_interval
        self.probe_path = probe_path
        self.failure_threshold = failure_threshold
        self._clock = clock
        self._lock: Optional[asyncio.Lock] = None

        self.reachable = True
        self.last_checked_at = 0.0
        self.consecutive_failures = 0
        self.probe_count = 0

    def _is_fresh(self) -> bool:
        return self._clock() - self.last_checked_at < self.check_interval

    async def is_available(self) -> bool:
        """Return cached reachability, probing if the last check is stale."""
        if self._is_fresh():
            return self.reachable

        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            # Another task may have probed while we waited.
            if self._is_fresh():
                return self.reachable
            return await self._probe()

    async def _probe(self) -> bool:
        self.probe_count += 1
        logger.info("swapi.availability.probe", extra={"extra_data": {"path": self.probe_path}})
        result = await self.client.get_resource(self.probe_path)

        self.reachable = result.ok
        self.last_checked_at = self._clock()
        if result.ok:
            self.consecutive_failures = 0
            logger.info("swapi.availability.online")
        else:
            logger.warning(
                "swapi.availability.offline",
                extra={"extra_data": {"status": result.status.value, "error": result.error}},
            )
        return self.reachable

    def record_failure(self) -> None:
        """Note a transient failure seen by a caller.

        Once ``failure_threshold`` failures accumulate SWAPI is marked down
        until the next probe window.
        """
        self.consecutive_failures += 1
        if self.consecutive_failures >= self.failure_threshold and self.reachable:
            self.reachable = False
            self.last_checked_at = self._clock()
            logger.warning(
                "swapi.availability.marked_down",
                extra={"extra_data": {"consecutive_failures": self.consecutive_failures}},
            )

    def record_success(self) -> None:
        self.consecutive_failures = 0

    def reset(self) -> None:
        """Assume SWAPI is back and force the next check to probe."""
        self.reachable = True
        self.last_checked_at = 0.0
        self.consecutive_failures = 0
        logger.info("swapi.availability.reset")

    def status(self) -> AvailabilityStatus:
        last_checked = None
        if self.last_checked_at:
            last_checked = datetime.fromtimestamp(self.last_checked_at, tz=timezone.utc)
        return AvailabilityStatus(
            reachable=self.reachable,
            last_checked_at=last_checked,
            consecutive_failures=self.consecutive_failures,
            check_interval=self.check_interval,
            fresh=self._is_fresh(),
        )
