"""Cooperative cancellation for cron jobs."""

import asyncio
import logging
from typing import Callable

from cronkit.handle import Handle

logger = logging.getLogger("cronkit")


class CancellationToken:
    """One-shot cancellation signal.

    Callbacks registered before ``cancel()`` run once when it is called;
    callbacks registered afterwards run immediately.

    Example:
        token = CancellationToken()
        task = cron("report", "0 * * * *", send_report, CronOptions(signal=token))
        ...
        token.cancel()
        await task
    """

    def __init__(self):
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return

        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []

        if self._event is not None:
            self._event.set()

        for callback in callbacks:
            self._run(callback)

    def add_callback(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            self._run(callback)
        else:
            self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[], None]) -> bool:
        if callback in self._callbacks:
            self._callbacks.remove(callback)
            return True
        return False

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _run(self, callback: Callable[[], None]) -> None:
        # One failing observer must not keep the others from running
        try:
            callback()
        except Exception:
            logger.exception(f"Error in cancellation callback {callback!r}")


def bind_cancellation(token: CancellationToken, handle: Handle) -> Callable[[], None]:
    """Release ``handle`` when ``token`` is cancelled.

    Args:
        token: Cancellation signal supplied by the caller
        handle: Registration to release

    Returns:
        Function that detaches the handle from the token
    """
    token.add_callback(handle.close)

    def detach() -> None:
        token.remove_callback(handle.close)

    return detach
