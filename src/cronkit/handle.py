"""Handle to a live cron registration."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cronkit.engines.base import BaseEngine

logger = logging.getLogger("cronkit")


class Handle:
    """Opaque reference to a registration held by an engine.

    The driver uses it to request ticks and the cancellation bridge uses it
    to stop them. Closing releases the registration through the engine
    exactly once, whichever path closes it first.

    Example:
        with engine.create_registration("cleanup", "0 3 * * *") as handle:
            while await handle.next_tick(True):
                ...
    """

    def __init__(self, rid: int, name: str, engine: "BaseEngine"):
        self.rid = rid
        self.name = name
        self._engine = engine
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def next_tick(self, last_success: bool) -> bool:
        """Wait for the next tick of this registration.

        Args:
            last_success: Whether the previous handler run succeeded

        Returns:
            True if the handler should run now, False if no tick will ever come
        """
        if self._closed:
            return False
        return await self._engine.await_next_tick(self, last_success)

    def close(self) -> None:
        """Release the registration. Safe to call more than once."""
        if self._closed:
            return

        self._closed = True
        self._engine.release(self)
        logger.debug(f"Released cron handle {self.name}[{self.rid}]")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Handle(rid={self.rid}, name='{self.name}', {state})"
