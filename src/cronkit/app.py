import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable

from cronkit.cancellation import CancellationToken, bind_cancellation
from cronkit.config import Config, EngineConfig
from cronkit.driver import Handler, JobDriver
from cronkit.engines.base import BaseEngine
from cronkit.engines.factory import get_engine
from cronkit.exceptions import AppNotRunningError, ConfigurationError, DuplicateJobError
from cronkit.registration import Registration, register
from cronkit.schedule import ScheduleLike, parse_schedule

logger = logging.getLogger("cronkit")

_default_engine: BaseEngine | None = None


def get_default_engine() -> BaseEngine:
    """Process-wide engine used when none is passed explicitly."""
    global _default_engine
    if _default_engine is None:
        _default_engine = get_engine(None)
    return _default_engine


def _resolve(engine: BaseEngine | None) -> BaseEngine:
    # Engines may define __len__, so test against None rather than truthiness
    return engine if engine is not None else get_default_engine()


@dataclass
class CronOptions:
    """Per-job options.

    Args:
        backoff_schedule: Seconds to wait before retrying after consecutive
            handler failures (None = engine default)
        signal: Token that stops the job when cancelled
    """
    backoff_schedule: Sequence[float] | None = None
    signal: CancellationToken | None = None


def _prepare(
    name: str,
    schedule: ScheduleLike,
    handler: Any,
    options: Any,
) -> tuple[Registration, CronOptions]:
    """Run every registration-time check. Never touches the engine."""
    if name is None or name == "":
        raise ConfigurationError("cron requires a unique name")

    if schedule is None:
        raise ConfigurationError("cron requires a valid schedule")

    canonical = parse_schedule(schedule)

    if callable(handler) and callable(options):
        raise ConfigurationError("options must be a CronOptions instance, not a callable")

    if not callable(handler):
        raise ConfigurationError("cron requires a handler")

    if options is None:
        options = CronOptions()
    elif not isinstance(options, CronOptions):
        raise ConfigurationError(
            f"options must be a CronOptions instance, got {type(options).__name__}"
        )

    return Registration(name, canonical, options.backoff_schedule), options


async def _drive(driver: JobDriver, detach: Callable[[], None] | None) -> None:
    try:
        await driver.run()
    finally:
        if detach is not None:
            detach()


def _launch(
    engine: BaseEngine,
    registration: Registration,
    handler: Handler,
    options: CronOptions,
) -> tuple[JobDriver, "asyncio.Task[None]"]:
    loop = asyncio.get_running_loop()

    handle = register(engine, registration)

    detach = None
    if options.signal is not None:
        detach = bind_cancellation(options.signal, handle)

    driver = JobDriver(handle, handler)
    task = loop.create_task(_drive(driver, detach), name=f"cron:{registration.name}")
    return driver, task


def cron(
    name: str,
    schedule: ScheduleLike,
    handler: Handler,
    options: CronOptions | None = None,
    *,
    engine: BaseEngine | None = None,
) -> "asyncio.Task[None]":
    """Run ``handler`` on every tick of ``schedule``.

    Must be called from a running event loop. All argument checks happen
    before the engine is contacted.

    Args:
        name: Unique job name
        schedule: Cron string, Schedule instance or mapping of schedule fields
        handler: Callable taking no arguments, sync or async
        options: Backoff schedule and cancellation token
        engine: Engine to register with (defaults to a process-wide LocalEngine)

    Returns:
        Task that completes once the job stops receiving ticks

    Raises:
        ConfigurationError: If name, schedule, handler or options are missing or invalid
        InvalidScheduleError: If the schedule is malformed
        EngineError: If the engine rejects the registration

    Example:
        token = CancellationToken()
        task = cron("heartbeat", {"minute": {"start": 0, "every": 5}}, ping,
                    CronOptions(backoff_schedule=[1, 5], signal=token))
    """
    registration, options = _prepare(name, schedule, handler, options)
    _, task = _launch(_resolve(engine), registration, handler, options)
    return task


def cron_with_options(
    name: str,
    schedule: ScheduleLike,
    options: CronOptions | None,
    handler: Handler,
    *,
    engine: BaseEngine | None = None,
) -> "asyncio.Task[None]":
    """Same as ``cron`` with the options given before the handler."""
    registration, options = _prepare(name, schedule, handler, options)
    _, task = _launch(_resolve(engine), registration, handler, options)
    return task


@dataclass
class CronJob:
    registration: Registration
    handler: Handler
    options: CronOptions

    @property
    def name(self) -> str:
        return self.registration.name

    @property
    def schedule(self) -> str:
        return self.registration.schedule


class Cronkit:
    """Application owning a set of cron jobs and their engine.

    Usage:
        app = Cronkit()

        @app.job("*/5 * * * *")
        async def poll_feeds():
            ...

        @app.job({"hour": 3, "minute": 0}, name="nightly-cleanup", backoff_schedule=[10, 60])
        def cleanup():
            ...

        async def main():
            async with app:
                await app.wait()
    """

    def __init__(self, config: Config | None = None, engine: BaseEngine | None = None):
        if config is None:
            config = Config()

        self._config = config
        self._engine = engine if engine is not None else config.create_engine()
        self._jobs: dict[str, CronJob] = {}
        self._drivers: dict[str, JobDriver] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._running = False

    @classmethod
    def from_url(cls, engine: str | None = None) -> "Cronkit":
        """Convenience method to create an app from an engine URL.

        Args:
            engine: Engine connection URL (None = in-process LocalEngine)
        """
        return cls(config=Config(engine=EngineConfig(url=engine)))

    @property
    def engine(self) -> BaseEngine:
        return self._engine

    def job(
        self,
        schedule: ScheduleLike,
        name: str | None = None,
        backoff_schedule: Sequence[float] | None = None,
        signal: CancellationToken | None = None,
    ):
        """Register a function as a cron job.

        Args:
            schedule: Cron string, Schedule instance or mapping of schedule fields
            name: Job name (defaults to function name)
            backoff_schedule: Seconds between retries after failures
            signal: Token that stops this job when cancelled

        Returns:
            Decorator function
        """
        def decorator(func: Handler):
            self.add_job(
                name or func.__name__,
                schedule,
                func,
                CronOptions(backoff_schedule=backoff_schedule, signal=signal),
            )
            return func

        return decorator

    def add_job(
        self,
        name: str,
        schedule: ScheduleLike,
        handler: Handler,
        options: CronOptions | None = None,
    ) -> CronJob:
        """Add a job, launching it right away if the app is running.

        Raises:
            ConfigurationError: If the job definition is invalid
            DuplicateJobError: If a job with this name already exists
        """
        registration, options = _prepare(name, schedule, handler, options)

        if name in self._jobs:
            raise DuplicateJobError(name)

        job = CronJob(registration=registration, handler=handler, options=options)

        if self._running:
            self._start_job(job)

        self._jobs[name] = job

        return job

    def cron(
        self,
        name: str,
        schedule: ScheduleLike,
        handler: Handler,
        options: CronOptions | None = None,
    ) -> "asyncio.Task[None]":
        """Add and launch a job on the running app.

        Raises:
            AppNotRunningError: If the app has not been started
        """
        if not self._running:
            raise AppNotRunningError()

        self.add_job(name, schedule, handler, options)
        return self._tasks[name]

    def _start_job(self, job: CronJob) -> None:
        driver, task = _launch(self._engine, job.registration, job.handler, job.options)
        self._drivers[job.name] = driver
        self._tasks[job.name] = task

    def list_jobs(self) -> list[str]:
        return list(self._jobs.keys())

    def get_driver(self, name: str) -> JobDriver | None:
        return self._drivers.get(name)

    async def start(self):
        if self._running:
            return

        self._running = True
        try:
            for job in self._jobs.values():
                self._start_job(job)
        except Exception:
            await self._shutdown_jobs(timeout=None)
            self._running = False
            raise

        logger.info(f"Cronkit started: jobs={len(self._jobs)}")

    async def wait(self) -> None:
        """Wait until every launched job has terminated."""
        if self._tasks:
            await asyncio.gather(*self._tasks.values())

    async def stop(self, timeout: float | None = 30.0):
        """Stop all jobs.

        Running handlers are allowed to finish; jobs still busy after
        ``timeout`` seconds are cancelled.

        Args:
            timeout: Max seconds to wait for running handlers
        """
        if not self._running:
            return

        self._running = False
        await self._shutdown_jobs(timeout)
        await self._engine.close()

        logger.info("Cronkit stopped")

    async def _shutdown_jobs(self, timeout: float | None) -> None:
        """Release every launched job and wait for its task to finish."""
        for driver in self._drivers.values():
            driver.handle.close()

        tasks = list(self._tasks.values())
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            if pending:
                logger.warning(f"Shutdown timeout, cancelling {len(pending)} cron jobs")
                for task in pending:
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        self._tasks.clear()
        self._drivers.clear()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    @property
    def is_running(self) -> bool:
        return self._running
