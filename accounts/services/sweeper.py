"""Background task that periodically deletes expired session tokens."""

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from accounts.services.token_store import TokenStore

logger = logging.getLogger("accounts.tokens")


class TokenSweeper:
    """Runs TokenStore.sweep_expired on a fixed interval.

    `run_once` performs a single sweep synchronously; `start`/`stop` manage the
    recurring asyncio task.
    """

    def __init__(
        self,
        store: TokenStore,
        session_factory: Callable[[], Session],
        interval_seconds: float = 3600,
    ) -> None:
        self.store = store
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Sweep expired tokens now and return how many were deleted."""
        db = self.session_factory()
        try:
            removed = self.store.sweep_expired(db)
        finally:
            db.close()
        if removed:
            logger.info("Token sweep removed %d expired token(s)", removed)
        return removed

    async def start(self) -> None:
        if self.running:
            logger.warning("Token sweeper already running")
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Token sweeper started (interval %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Token sweeper stopped")

    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.run_once)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Token sweep failed: %s", e)
