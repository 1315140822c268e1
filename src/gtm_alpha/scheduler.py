"""Consultation retention scheduler.

Purges consultations older than the retention window on start, then on a
configurable interval.
"""

from __future__ import annotations

import asyncio
import logging
import os

from .store import ConsultationStore

logger = logging.getLogger(__name__)

DEFAULT_PURGE_INTERVAL_HOURS = 24
DEFAULT_HISTORY_RETENTION_DAYS = 365


class PurgeScheduler:
    """Periodically removes expired consultation history."""

    def __init__(self, store: ConsultationStore):
        self._store = store
        self._task: asyncio.Task | None = None
        self._running = False
        self._interval_seconds = int(os.environ.get(
            "PURGE_INTERVAL_HOURS",
            str(DEFAULT_PURGE_INTERVAL_HOURS),
        )) * 3600
        self.retention_days = int(os.environ.get(
            "HISTORY_RETENTION_DAYS",
            str(DEFAULT_HISTORY_RETENTION_DAYS),
        ))

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the background purge loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "Purge scheduler started (interval: %d hours, retention: %d days)",
            self._interval_seconds // 3600,
            self.retention_days,
        )

    async def stop(self):
        """Stop the background purge loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Purge scheduler stopped")

    async def run_once(self) -> int:
        removed = await self._store.purge_expired(self.retention_days)
        if removed:
            logger.info("Purged %d consultation(s) older than %d days", removed, self.retention_days)
        return removed

    async def _run_loop(self):
        """Purge immediately, then once per interval."""
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error("Consultation purge failed: %s", exc, exc_info=True)
                await asyncio.sleep(60)
