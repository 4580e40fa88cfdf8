from abc import ABC, abstractmethod
from collections.abc import Sequence

from cronkit.handle import Handle


class BaseEngine(ABC):
    """Abstract base for scheduling engines.

    The engine owns everything about time: when a tick is due, how backoff
    delays are applied after failures, and where registrations live.

    Implementations must provide:
    - create_registration(): Register a named job and return its handle
    - await_next_tick(): Block until the job should run again
    - release(): Stop producing ticks for a handle
    """

    @abstractmethod
    def create_registration(
        self,
        name: str,
        schedule: str,
        backoff_schedule: Sequence[float] | None = None,
    ) -> Handle:
        """Register a job.

        Args:
            name: Unique job name
            schedule: Canonical five-field cron string
            backoff_schedule: Delays in seconds used after consecutive failures
                (None = engine default)

        Returns:
            Handle of the new registration

        Raises:
            DuplicateJobError: If the name is already registered
            EngineError: If the name or schedule is rejected
        """
        pass

    @abstractmethod
    async def await_next_tick(self, handle: Handle, last_success: bool) -> bool:
        """Wait until the job is due.

        Args:
            handle: Registration handle
            last_success: Outcome of the previous handler run

        Returns:
            True if the handler should run now, False if no further ticks
            will be produced (the handle was released)
        """
        pass

    @abstractmethod
    def release(self, handle: Handle) -> None:
        """Release a registration. Must be idempotent.

        Args:
            handle: Registration handle
        """
        pass

    async def close(self) -> None:
        """Release all registrations and clean up resources.

        Optional method for engines that need cleanup.
        """
        pass
