"""Consultation store behind caching and progress tracking.

Consultations are kept per business key. ``get`` only returns records that
are younger than the cache TTL; the full history (bounded per key) stays
available for progress comparison until the purge scheduler removes it.

The store has an explicit lifecycle: ``open()`` before use, ``close()`` when done.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import weakref
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from .core.models import BusinessContext, ConsultationResult, StoredConsultation
from .db import create_engine, create_session_factory, init_db
from .sqlmodels import ConsultationRecord

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_DAYS = 30
DEFAULT_HISTORY_LIMIT = 12


class StoreError(Exception):
    """The consultation store could not be opened, read or written."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def business_key(context: BusinessContext) -> str:
    """Identity of a business: slug of company name, industry and stage."""
    parts = (context.company_name, context.industry, context.business_stage)
    return "-".join(_slug(part) or "unknown" for part in parts)


def _to_stored(record: ConsultationRecord) -> StoredConsultation:
    return StoredConsultation(
        consultation_id=record.consultation_id,
        business_key=record.business_key,
        context=BusinessContext.model_validate_json(record.context_json),
        result=ConsultationResult.model_validate_json(record.result_json),
        created_at=record.created_at,
    )


class ConsultationStore:
    """SQLite-backed consultation store with a per-key write lock."""

    def __init__(
        self,
        url: Optional[str] = None,
        ttl_days: Optional[int] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._url = url
        if ttl_days is None:
            ttl_days = int(os.environ.get("CACHE_TTL_DAYS", str(DEFAULT_CACHE_TTL_DAYS)))
        self.ttl = timedelta(days=ttl_days)
        self.history_limit = history_limit
        self._engine = None
        self._session_factory = None
        self._open_lock = asyncio.Lock()
        # Entries vanish once no task holds or waits on the lock.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine and tables. Opening an open store is a no-op."""
        if self._engine is not None:
            return
        async with self._open_lock:
            if self._engine is not None:
                return
            engine = None
            try:
                engine = create_engine(self._url)
                await init_db(engine)
            except (SQLAlchemyError, OSError) as exc:
                if engine is not None:
                    await engine.dispose()
                raise StoreError(f"Could not open consultation store: {exc}") from exc
            self._session_factory = create_session_factory(engine)
            self._engine = engine

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _sessions(self):
        if self._session_factory is None:
            raise StoreError("Consultation store is not open")
        return self._session_factory

    def lock(self, key: str) -> asyncio.Lock:
        """Lock serializing check-compute-write for one business key."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def get(self, key: str, now: Optional[datetime] = None) -> Optional[StoredConsultation]:
        """Newest consultation for the key that is still within the cache TTL."""
        cutoff = (now or utcnow()) - self.ttl
        session_factory = self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(ConsultationRecord)
                    .where(ConsultationRecord.business_key == key)
                    .where(ConsultationRecord.created_at >= cutoff)
                    .order_by(ConsultationRecord.created_at.desc(), ConsultationRecord.id.desc())
                    .limit(1)
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read consultation for {key}: {exc}") from exc
        return _to_stored(record) if record else None

    async def get_by_id(self, consultation_id: str) -> Optional[StoredConsultation]:
        session_factory = self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(ConsultationRecord).where(ConsultationRecord.consultation_id == consultation_id)
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read consultation {consultation_id}: {exc}") from exc
        return _to_stored(record) if record else None

    async def set(self, key: str, value: StoredConsultation) -> None:
        """Persist a consultation and drop the oldest records beyond the history limit."""
        scores = value.result.epic_scores
        record = ConsultationRecord(
            consultation_id=value.consultation_id,
            business_key=key,
            company_name=value.context.company_name,
            industry=value.context.industry,
            business_stage=value.context.business_stage,
            score_e=scores.E,
            score_p=scores.P,
            score_i=scores.I,
            score_c=scores.C,
            primary_focus=value.result.primary_focus.value,
            context_json=value.context.model_dump_json(),
            result_json=value.result.model_dump_json(),
            created_at=value.created_at,
        )
        session_factory = self._sessions()
        try:
            async with session_factory() as session:
                session.add(record)
                await session.flush()
                stale = await session.execute(
                    select(ConsultationRecord.id)
                    .where(ConsultationRecord.business_key == key)
                    .order_by(ConsultationRecord.created_at.desc(), ConsultationRecord.id.desc())
                    .offset(self.history_limit)
                )
                stale_ids = [row[0] for row in stale]
                if stale_ids:
                    await session.execute(
                        delete(ConsultationRecord).where(ConsultationRecord.id.in_(stale_ids))
                    )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not store consultation {value.consultation_id}: {exc}") from exc
        logger.info("Stored consultation %s for %s", value.consultation_id, key)

    async def history(self, key: str) -> list[StoredConsultation]:
        """All retained consultations for the key, oldest first."""
        session_factory = self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(ConsultationRecord)
                    .where(ConsultationRecord.business_key == key)
                    .order_by(ConsultationRecord.created_at.asc(), ConsultationRecord.id.asc())
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read history for {key}: {exc}") from exc
        return [_to_stored(r) for r in rows]

    async def purge_expired(self, retention_days: int, now: Optional[datetime] = None) -> int:
        """Delete consultations older than the retention window. Returns the number removed."""
        cutoff = (now or utcnow()) - timedelta(days=retention_days)
        session_factory = self._sessions()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    delete(ConsultationRecord).where(ConsultationRecord.created_at < cutoff)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not purge consultations: {exc}") from exc
        return result.rowcount or 0
