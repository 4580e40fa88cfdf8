"""Registration of cron jobs with an engine."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cronkit.exceptions import ConfigurationError
from cronkit.handle import Handle

if TYPE_CHECKING:
    from cronkit.engines.base import BaseEngine

logger = logging.getLogger("cronkit")


@dataclass(frozen=True)
class Registration:
    """A job to be registered with an engine.

    Attributes:
        name: Unique job name
        schedule: Canonical cron string (already validated and normalized)
        backoff_schedule: Delays in seconds applied after consecutive
            handler failures (None lets the engine pick its default)
    """

    name: str
    schedule: str
    backoff_schedule: tuple[float, ...] | None = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("cron requires a unique name")

        if not isinstance(self.schedule, str):
            raise ConfigurationError("Registration schedule must be a canonical cron string")

        if self.backoff_schedule is not None:
            object.__setattr__(
                self, "backoff_schedule", _coerce_backoff(self.backoff_schedule)
            )


def _coerce_backoff(backoff_schedule: Sequence[float]) -> tuple[float, ...]:
    if isinstance(backoff_schedule, (str, bytes)) or not isinstance(backoff_schedule, Sequence):
        raise ConfigurationError("backoff_schedule must be a sequence of delays")

    delays = []
    for delay in backoff_schedule:
        if isinstance(delay, bool) or not isinstance(delay, (int, float)):
            raise ConfigurationError(f"backoff_schedule entries must be numbers, got {delay!r}")
        if delay < 0:
            raise ConfigurationError("backoff_schedule entries must be non-negative")
        delays.append(float(delay))

    return tuple(delays)


def register(engine: "BaseEngine", registration: Registration) -> Handle:
    """Create the registration in the engine.

    Args:
        engine: Engine that will produce ticks
        registration: Validated registration

    Returns:
        Handle of the live registration

    Raises:
        EngineError: If the engine rejects the registration
    """
    handle = engine.create_registration(
        registration.name,
        registration.schedule,
        registration.backoff_schedule,
    )
    logger.info(f"Registered cron job {registration.name} ({registration.schedule})")
    return handle
