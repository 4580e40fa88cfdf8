"""cronkit - recurring cron jobs for asyncio.

Register a named job against a cron schedule and have its handler run once
per tick, with retry backoff after failures and cooperative cancellation.

Basic usage:
    import asyncio
    from cronkit import cron, CronOptions, CancellationToken

    async def send_digest():
        ...

    async def main():
        token = CancellationToken()
        job = cron(
            "digest",
            {"minute": 0, "hour": {"start": 8, "every": 4}},  # "0 8/4 * * *"
            send_digest,
            CronOptions(backoff_schedule=[1, 5, 30], signal=token),
        )
        ...
        token.cancel()
        await job

Application usage:
    from cronkit import Cronkit

    app = Cronkit()

    @app.job("*/10 * * * *")
    def refresh_cache():
        ...

    async def main():
        async with app:
            await app.wait()
"""

__version__ = "0.1.0"

from cronkit.app import Cronkit, CronJob, CronOptions, cron, cron_with_options
from cronkit.cancellation import CancellationToken, bind_cancellation
from cronkit.config import Config, EngineConfig
from cronkit.driver import DriverState, JobDriver
from cronkit.engines import BaseEngine, CronExpression, LocalEngine, get_engine
from cronkit.handle import Handle
from cronkit.registration import Registration, register
from cronkit.schedule import Schedule, Step, normalize, parse_schedule, validate
from cronkit.exceptions import (
    CronkitError,
    ConfigurationError,
    InvalidScheduleError,
    EngineError,
    DuplicateJobError,
    AppNotRunningError,
)

__all__ = [
    # Main API
    "cron",
    "cron_with_options",
    "CronOptions",
    "Cronkit",
    "CronJob",
    "CancellationToken",
    "bind_cancellation",
    # Schedules
    "Schedule",
    "Step",
    "validate",
    "normalize",
    "parse_schedule",
    # Driver and registration
    "JobDriver",
    "DriverState",
    "Handle",
    "Registration",
    "register",
    # Engines
    "BaseEngine",
    "LocalEngine",
    "CronExpression",
    "get_engine",
    # Configuration
    "Config",
    "EngineConfig",
    # Exceptions
    "CronkitError",
    "ConfigurationError",
    "InvalidScheduleError",
    "EngineError",
    "DuplicateJobError",
    "AppNotRunningError",
]
