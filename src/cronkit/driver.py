"""Execution driver that runs a job handler once per engine tick."""

import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from cronkit.handle import Handle

logger = logging.getLogger("cronkit.driver")

Handler = Callable[[], "Awaitable[Any] | Any"]


class DriverState(Enum):
    AWAITING_TICK = "awaiting_tick"
    RUNNING_HANDLER = "running_handler"
    REPORTING_OUTCOME = "reporting_outcome"
    TERMINATED = "terminated"


class JobDriver:
    """Per-job loop negotiating ticks with the engine.

    The driver asks the engine for the next tick, passing whether the last
    handler run succeeded, runs the handler, and repeats until the engine
    reports that no more ticks will come. Retry timing after failures is left
    entirely to the engine; the driver never sleeps on its own.

    Handler errors are logged and reported as a failed outcome. They never
    stop the loop.

    The handle is closed when the loop exits, whatever the reason.
    """

    def __init__(self, handle: Handle, handler: Handler, name: str | None = None):
        self.handle = handle
        self.handler = handler
        self.name = name or handle.name
        self.state = DriverState.AWAITING_TICK
        self.last_success = True
        self.runs = 0
        self.failures = 0

    async def run(self) -> None:
        try:
            while True:
                self.state = DriverState.AWAITING_TICK
                if not await self.handle.next_tick(self.last_success):
                    break

                self.state = DriverState.RUNNING_HANDLER
                success = await self._invoke()

                self.state = DriverState.REPORTING_OUTCOME
                self.last_success = success
        finally:
            self.state = DriverState.TERMINATED
            self.handle.close()
            logger.debug(f"Cron job {self.name} terminated after {self.runs} runs")

    async def _invoke(self) -> bool:
        """Run the handler once and report whether it succeeded."""
        self.runs += 1
        try:
            result = self.handler()
            if inspect.isawaitable(result):
                await result
        except Exception:
            self.failures += 1
            logger.exception(f"Exception in cron handler {self.name}")
            return False

        return True

    @property
    def is_terminated(self) -> bool:
        return self.state is DriverState.TERMINATED
