"""
Asynchronous deployment poller.

Turns a fire-and-forget ``createServer`` call into a bounded wait: the
service list is polled until the new service reports ``Deployed`` and
``running``, or the deadline passes.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

from elestio.exceptions import DeploymentTimeoutError
from elestio.logging import get_logger
from elestio.services.deployment._config import (
    DEFAULT_DEPLOY_TIMEOUT,
    DEFAULT_NOT_FOUND_INTERVAL,
    DEFAULT_POLL_INTERVAL,
)
from elestio.services.deployment._models import PollState, is_deployed, matches_resource

logger = get_logger(__name__)

ListResources = Callable[[], Awaitable[list[dict[str, Any]]]]
StatusCallback = Callable[[str | None, dict[str, Any]], None]


class AsyncDeploymentPoller:
    """
    Waits for a deployment to complete.

    A service missing from the list is not an error: it may not be visible
    yet. Only the deadline ends a wait that never succeeds.

    Example:
        >>> poller = AsyncDeploymentPoller(lambda: services.list_raw(project_id))
        >>> service = await poller.wait_for("12345", timeout=600)
    """

    def __init__(
        self,
        list_resources: ListResources,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        not_found_interval: float = DEFAULT_NOT_FOUND_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_status: StatusCallback | None = None,
    ) -> None:
        """
        Initialize poller.

        Args:
            list_resources: Coroutine function returning current services.
            poll_interval: Delay between checks of a visible service.
            not_found_interval: Delay when the service is not listed yet.
            clock: Monotonic clock in seconds.
            sleep: Async sleep.
            on_status: Callback(status, service) on each status change.
        """
        self._list_resources = list_resources
        self._poll_interval = poll_interval
        self._not_found_interval = not_found_interval
        self._clock = clock
        self._sleep = sleep
        self._on_status = on_status

    async def wait_for(
        self,
        resource_id: str | int,
        timeout: float = DEFAULT_DEPLOY_TIMEOUT,
    ) -> dict[str, Any]:
        """
        Poll until the service is deployed and running.

        Args:
            resource_id: vmID or providerServerID of the service.
            timeout: Seconds before giving up.

        Returns:
            The service record in its final state.

        Raises:
            DeploymentTimeoutError: Deadline passed first.
        """
        start = self._clock()
        state = PollState(
            resource_id=str(resource_id),
            start_time=start,
            deadline=start + timeout,
        )

        while not state.expired(self._clock()):
            state.cycles += 1
            services = await self._list_resources()
            service = next(
                (s for s in services if matches_resource(s, state.resource_id)),
                None,
            )

            if service is None:
                logger.debug(f"{state.resource_id} not listed yet (cycle {state.cycles})")
                await self._sleep(self._not_found_interval)
                continue

            status = service.get("deploymentStatus")
            if state.observe(status):
                logger.info(f"Status: {status}")
                if self._on_status is not None:
                    self._on_status(status, service)

            if is_deployed(service):
                logger.info(
                    f"Deployment of {state.resource_id} complete "
                    f"after {state.elapsed(self._clock()):.0f}s"
                )
                return service

            await self._sleep(self._poll_interval)

        raise DeploymentTimeoutError(
            state.resource_id,
            elapsed=state.elapsed(self._clock()),
            timeout=timeout,
        )
