"""In-process scheduling engine."""

import asyncio
import itertools
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from cronkit.config import DEFAULT_BACKOFF_SCHEDULE
from cronkit.engines.base import BaseEngine
from cronkit.engines.cron import CronExpression
from cronkit.exceptions import DuplicateJobError, EngineError
from cronkit.handle import Handle

logger = logging.getLogger("cronkit.engine")

NAME_PATTERN = re.compile(r"^[\w\s-]+$")


@dataclass
class _Registration:
    handle: Handle
    expression: CronExpression
    backoff_schedule: tuple[float, ...]
    released: asyncio.Event = field(default_factory=asyncio.Event)
    backoff_index: int = 0


class LocalEngine(BaseEngine):
    """Engine that keeps registrations in memory and ticks with asyncio timers.

    Best for:
    - Single-process applications
    - Development and testing

    Limitations:
    - Registrations lost on restart
    - No coordination between processes

    After a failed run the next tick is offered after the next delay from the
    job's backoff schedule. Once the schedule is used up, or after a
    successful run, ticks follow the cron expression again.
    """

    def __init__(
        self,
        max_name_length: int = 64,
        max_backoff_retries: int = 5,
        max_backoff_delay: float = 3600.0,
        default_backoff_schedule: Sequence[float] = DEFAULT_BACKOFF_SCHEDULE,
        time_source: Callable[[], datetime] = datetime.now,
    ):
        self.max_name_length = max_name_length
        self.max_backoff_retries = max_backoff_retries
        self.max_backoff_delay = max_backoff_delay
        self.default_backoff_schedule = tuple(default_backoff_schedule)
        self._time_source = time_source
        self._rids = itertools.count(1)
        self._registrations: dict[int, _Registration] = {}
        self._names: dict[str, int] = {}

    def create_registration(
        self,
        name: str,
        schedule: str,
        backoff_schedule: Sequence[float] | None = None,
    ) -> Handle:
        self._check_name(name)

        try:
            expression = CronExpression(schedule)
            expression.next_run(self._time_source())
        except ValueError as e:
            raise EngineError(f"Invalid cron schedule '{schedule}': {e}") from e

        if backoff_schedule is None:
            backoff = self.default_backoff_schedule
        else:
            backoff = self._check_backoff(backoff_schedule)

        handle = Handle(next(self._rids), name, self)
        self._registrations[handle.rid] = _Registration(handle, expression, backoff)
        self._names[name] = handle.rid

        logger.debug(f"Created registration {name}[{handle.rid}] for '{schedule}'")
        return handle

    def _check_name(self, name: str) -> None:
        if len(name) > self.max_name_length:
            raise EngineError(f"Cron name cannot exceed {self.max_name_length} characters")

        if not NAME_PATTERN.match(name):
            raise EngineError(
                f"Invalid cron name '{name}': only alphanumeric characters, "
                f"whitespace, hyphens, and underscores are allowed"
            )

        if name in self._names:
            raise DuplicateJobError(name)

    def _check_backoff(self, backoff_schedule: Sequence[float]) -> tuple[float, ...]:
        if len(backoff_schedule) > self.max_backoff_retries:
            raise EngineError(
                f"Backoff schedule cannot have more than {self.max_backoff_retries} entries"
            )

        for delay in backoff_schedule:
            if delay < 0 or delay > self.max_backoff_delay:
                raise EngineError(
                    f"Backoff delays must be between 0 and {self.max_backoff_delay} seconds"
                )

        return tuple(float(delay) for delay in backoff_schedule)

    def next_delay(self, handle: Handle, last_success: bool) -> float:
        """Seconds until the next tick, advancing the backoff position.

        Raises:
            KeyError: If the handle is not registered
        """
        registration = self._registrations[handle.rid]

        if not last_success and registration.backoff_index < len(registration.backoff_schedule):
            delay = registration.backoff_schedule[registration.backoff_index]
            registration.backoff_index += 1
            return delay

        registration.backoff_index = 0
        now = self._time_source()
        next_run = registration.expression.next_run(now)
        return max((next_run - now).total_seconds(), 0.0)

    async def await_next_tick(self, handle: Handle, last_success: bool) -> bool:
        registration = self._registrations.get(handle.rid)
        if registration is None or registration.released.is_set():
            return False

        try:
            delay = self.next_delay(handle, last_success)
        except ValueError as e:
            logger.error(f"No further ticks for {handle.name}[{handle.rid}]: {e}")
            return False

        logger.debug(f"Next tick of {handle.name}[{handle.rid}] in {delay:.3f}s")

        try:
            await asyncio.wait_for(registration.released.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return not registration.released.is_set()

        return False

    def release(self, handle: Handle) -> None:
        registration = self._registrations.pop(handle.rid, None)
        if registration is None:
            return

        if self._names.get(handle.name) == handle.rid:
            del self._names[handle.name]

        registration.released.set()

    async def close(self) -> None:
        for registration in list(self._registrations.values()):
            registration.handle.close()

    def is_registered(self, name: str) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._registrations)
